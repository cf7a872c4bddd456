"""
Configuration settings for the MakePDF conversion service.

This module handles environment variables, application settings,
and configuration validation using Pydantic Settings.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Every setting can be overridden with a ``MAKEPDF_``-prefixed
    environment variable (case-insensitive).
    """

    # Application settings
    APP_NAME: str = "MakePDF"
    VERSION: str = "2.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS settings
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]
    ALLOWED_HOSTS: list[str] = ["localhost", "127.0.0.1"]

    # Logging settings
    LOG_LEVEL: str = "INFO"

    # Upload settings
    MAX_FILE_SIZE: int = 25 * 1024 * 1024  # 25MB

    # Comma separated extension allow-list, e.g. "doc,docx,odt"
    SETTINGS_FORMATS: str = "doc,docx,odt,rtf,xls,xlsx,ods,ppt,pptx,odp"
    TARGET_FORMAT: str = ".pdf"

    # Conversion settings
    MAX_CONCURRENT_CONVERSIONS: int = 4

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment setting."""
        allowed_envs = ["development", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"ENVIRONMENT must be one of {allowed_envs}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level setting."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of {allowed_levels}")
        return v.upper()

    @field_validator("MAX_FILE_SIZE")
    @classmethod
    def validate_max_file_size(cls, v: int) -> int:
        """Validate maximum file size."""
        if v <= 0:
            raise ValueError("MAX_FILE_SIZE must be positive")
        if v > 500 * 1024 * 1024:  # 500MB
            raise ValueError("MAX_FILE_SIZE cannot exceed 500MB")
        return v

    @field_validator("TARGET_FORMAT")
    @classmethod
    def validate_target_format(cls, v: str) -> str:
        if not v.startswith(".") or len(v.split(":")[0]) < 2:
            raise ValueError("TARGET_FORMAT must look like '.pdf' or '.pdf:<filter>'")
        return v

    @field_validator("MAX_CONCURRENT_CONVERSIONS")
    @classmethod
    def validate_max_concurrent(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MAX_CONCURRENT_CONVERSIONS must be at least 1")
        return v

    @property
    def allowed_formats(self) -> list[str]:
        """Extension allow-list, lower-cased and without dots."""
        return [
            fmt.strip().lstrip(".").lower()
            for fmt in self.SETTINGS_FORMATS.split(",")
            if fmt.strip()
        ]

    class Config:
        """Pydantic configuration."""

        env_prefix = "MAKEPDF_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Create settings instance
settings = Settings()


def get_settings() -> Settings:
    """
    Get application settings.

    Returns:
        Settings: Application settings instance
    """
    return settings
