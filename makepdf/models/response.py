"""
Response models for the MakePDF API.

This module defines Pydantic models for API response formatting.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class ConversionErrorResponse(BaseModel):
    """
    Body returned when a conversion fails.

    ``detail`` is the generic user-facing notice; the error type and stage
    are there for clients that want to react differently to, say, a timeout.
    """

    detail: str = Field(..., description="User-facing failure notice")
    error_type: str = Field(..., description="Machine-readable error type")
    stage: str | None = Field(default=None, description="Pipeline stage that failed")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class FormatsResponse(BaseModel):
    """Extensions accepted for conversion and the format they convert to."""

    allowed_formats: list[str] = Field(..., description="Accepted file extensions, without dots")
    target_format: str = Field(..., description="Dot-prefixed target format")
    max_file_size: int = Field(..., description="Maximum upload size in bytes")
