"""
Utilities package for the MakePDF conversion service.

This package contains utility modules for common operations.
"""

from .fs import (
    create_temp_directory,
    ensure_directory,
    remove_directory,
    write_file_bytes,
)
from .shell import (
    CommandCancelledError,
    CommandResult,
    get_command_version,
    run_command_safely,
)

__all__ = [
    "run_command_safely", "get_command_version", "CommandResult", "CommandCancelledError",
    "ensure_directory", "create_temp_directory", "remove_directory",
    "write_file_bytes",
]
