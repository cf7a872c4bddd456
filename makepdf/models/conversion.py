"""
Conversion models for the MakePDF conversion service.

This module defines the values that flow through one conversion run:
the request, the pipeline states, the engine outcome and the final result.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from makepdf.exceptions import ConversionError


class PipelineState(str, Enum):
    """States of a single conversion run."""

    IDLE = "idle"
    LOCATING_BINARY = "locating_binary"
    STAGING_INPUT = "staging_input"
    INVOKING = "invoking"
    RETRIEVING_OUTPUT = "retrieving_output"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.SUCCEEDED, PipelineState.FAILED)


class ConversionRequest(BaseModel):
    """Immutable input of one conversion run."""

    document: bytes = Field(..., repr=False, description="Raw bytes of the input document")
    target_format: str = Field(default=".pdf", description="Dot-prefixed target format, optionally with a filter")

    class Config:
        frozen = True

    @field_validator("target_format")
    @classmethod
    def validate_target_format(cls, v: str) -> str:
        """Validate the format looks like '.pdf' or '.pdf:writer_pdf_Export'."""
        if not v.startswith("."):
            raise ValueError(f"Target format must start with '.': {v!r}")
        extension = v[1:].split(":")[0]
        if not extension or any(sep in extension for sep in ("/", "\\")):
            raise ValueError(f"Target format has no usable extension: {v!r}")
        return v


@dataclass(frozen=True)
class EngineRunOutcome:
    """A finished engine process that exited successfully."""

    returncode: int
    stdout: str
    stderr: str
    duration_seconds: float


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a conversion run: the produced bytes or the error that stopped it."""

    state: PipelineState
    output: bytes | None = None
    error: ConversionError | None = None
    engine_path: Path | None = None
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.SUCCEEDED

    def unwrap(self) -> bytes:
        """
        Return the converted bytes.

        Raises:
            ConversionError: The error the run failed with
        """
        if self.succeeded and self.output is not None:
            return self.output
        if self.error is not None:
            raise self.error
        raise ConversionError("No result from conversion")
