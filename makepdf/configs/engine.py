"""
Conversion engine configuration.

All environment-derived values the conversion pipeline needs are collected
here, so a pipeline receives one explicit settings object at construction
instead of reading the environment while it runs.
"""

from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings


class EngineSettings(BaseSettings):
    """LibreOffice engine settings."""

    # Install locations
    office_path: str = Field(
        default="/opt/libreoffice",
        validation_alias=AliasChoices("MAKEPDF_OFFICE_PATH", "OFFICE_PATH"),
        description="Linux install directory of a vendor LibreOffice package",
    )
    program_files: str = Field(
        default="C:\\Program Files",
        validation_alias=AliasChoices("MAKEPDF_ENGINE_PROGRAM_FILES", "PROGRAMFILES"),
        description="Windows Program Files directory",
    )
    program_files_x86: str = Field(
        default="C:\\Program Files (x86)",
        validation_alias=AliasChoices("MAKEPDF_ENGINE_PROGRAM_FILES_X86", "PROGRAMFILES(X86)"),
        description="Windows Program Files (x86) directory",
    )

    # Process settings
    conversion_timeout: float = Field(default=120.0, description="Engine deadline in seconds")
    poll_interval: float = Field(default=0.1, description="How often a running engine is checked for cancellation")

    # Output retrieval
    retrieval_attempts: int = Field(default=3, description="Read attempts for the output file")
    retrieval_interval: float = Field(default=0.2, description="Delay between read attempts in seconds")

    # Workspace root, system temp directory when unset
    temp_root: Path | None = Field(default=None, description="Parent directory for workspaces")

    class Config:
        env_prefix = "MAKEPDF_ENGINE_"
        case_sensitive = False
        populate_by_name = True
        extra = "ignore"

    @field_validator("conversion_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate conversion timeout."""
        if v <= 0:
            raise ValueError("Conversion timeout must be positive")
        if v > 3600:  # 1 hour max
            raise ValueError("Conversion timeout cannot exceed 1 hour")
        return v

    @field_validator("poll_interval")
    @classmethod
    def validate_poll_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Poll interval must be positive")
        return v

    @field_validator("retrieval_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("At least one retrieval attempt is required")
        return v

    @field_validator("retrieval_interval")
    @classmethod
    def validate_interval(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Retrieval interval cannot be negative")
        return v
