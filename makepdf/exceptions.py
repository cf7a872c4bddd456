"""
Exception classes for the MakePDF conversion service.

Every failure a conversion run can end in is a ``ConversionError`` subclass,
tagged with the pipeline stage that produced it so operators can tell a
missing engine from a crashed one in the logs.
"""

from typing import Any


class BaseServiceError(Exception):
    """Base exception for all service errors."""

    def __init__(self, message: str, error_type: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.error_type = error_type
        self.details = details or {}


class ErrorTypes:
    """Error type constants."""

    UNSUPPORTED_PLATFORM = "UNSUPPORTED_PLATFORM"
    BINARY_NOT_FOUND = "BINARY_NOT_FOUND"
    WORKSPACE_ERROR = "WORKSPACE_ERROR"
    WORKSPACE_CLOSED = "WORKSPACE_CLOSED"
    ENGINE_FAILURE = "ENGINE_FAILURE"
    ENGINE_TIMEOUT = "ENGINE_TIMEOUT"
    CANCELLED = "CANCELLED"
    READ_FAILURE = "READ_FAILURE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ConversionError(BaseServiceError):
    """Raised when a conversion run fails at any stage."""

    def __init__(
        self,
        message: str,
        error_type: str = ErrorTypes.UNKNOWN_ERROR,
        details: dict[str, Any] | None = None,
        stage: str | None = None,
    ):
        super().__init__(message, error_type, details)
        self.stage = stage

    def __str__(self) -> str:
        message = super().__str__()
        if self.stage:
            return f"[{self.stage}] {message}"
        return message


class UnsupportedPlatformError(ConversionError):
    """Raised when the host operating system has no known engine layout."""

    def __init__(self, platform: str):
        super().__init__(
            f"Operating system not yet supported: {platform}",
            ErrorTypes.UNSUPPORTED_PLATFORM,
            {"platform": platform},
        )


class BinaryNotFoundError(ConversionError):
    """Raised when none of the candidate engine paths exists."""

    def __init__(self, platform: str, candidates: list[str]):
        super().__init__(
            "Could not find soffice binary",
            ErrorTypes.BINARY_NOT_FOUND,
            {"platform": platform, "candidates": candidates},
        )


class WorkspaceError(ConversionError):
    """Raised when a workspace directory cannot be created or used."""

    def __init__(self, message: str, path: str | None = None, error_type: str = ErrorTypes.WORKSPACE_ERROR):
        super().__init__(message, error_type, {"path": path})


class WorkspaceClosedError(WorkspaceError):
    """Raised when a closed workspace is accessed."""

    def __init__(self, path: str | None = None):
        super().__init__("Workspace is closed", path, ErrorTypes.WORKSPACE_CLOSED)


class EngineFailureError(ConversionError):
    """Raised when the engine process exits with a nonzero status or a signal."""

    def __init__(
        self,
        exit_code: int | None,
        signal: int | None = None,
        stdout: str = "",
        stderr: str = "",
        message: str | None = None,
    ):
        if message is None and signal is not None:
            message = f"Conversion engine was killed by signal {signal}"
        elif message is None:
            message = f"Conversion engine exited with code {exit_code}"
        super().__init__(
            message,
            ErrorTypes.ENGINE_FAILURE,
            {"exit_code": exit_code, "signal": signal, "stdout": stdout, "stderr": stderr},
        )
        self.exit_code = exit_code
        self.signal = signal
        self.stdout = stdout
        self.stderr = stderr


class EngineTimeoutError(ConversionError):
    """Raised when the engine process outlives the conversion deadline."""

    def __init__(self, timeout_seconds: float):
        super().__init__(
            f"Conversion engine timed out after {timeout_seconds} seconds",
            ErrorTypes.ENGINE_TIMEOUT,
            {"timeout_seconds": timeout_seconds},
        )
        self.timeout_seconds = timeout_seconds


class ConversionCancelledError(ConversionError):
    """Raised when the caller abandons a conversion in flight."""

    def __init__(self, message: str = "Conversion was cancelled"):
        super().__init__(message, ErrorTypes.CANCELLED)


class ReadFailureError(ConversionError):
    """Raised when the engine reported success but its output never appeared."""

    def __init__(self, path: str, attempts: int, last_error: str | None = None):
        super().__init__(
            f"Output file not readable after {attempts} attempts: {path}",
            ErrorTypes.READ_FAILURE,
            {"path": path, "attempts": attempts, "last_error": last_error},
        )
        self.path = path
        self.attempts = attempts
