"""
Filesystem utilities for safe file operations.

This module provides the directory and file helpers used by conversion
workspaces, with logging and error handling in one place.
"""

import shutil
import tempfile
from pathlib import Path

from loguru import logger


def ensure_directory(path: str | Path) -> Path:
    """
    Ensure directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure

    Returns:
        Path object of the directory

    Raises:
        OSError: If directory cannot be created
    """
    path = Path(path)

    try:
        path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Directory ensured: {path}")
        return path
    except OSError as exc:
        logger.error(f"Failed to create directory {path}: {exc}")
        raise


def create_temp_directory(prefix: str = "temp_", parent: str | Path | None = None) -> Path:
    """
    Create a uniquely named temporary directory.

    Args:
        prefix: Prefix for temporary directory name
        parent: Directory to create it in (system temp root when None)

    Returns:
        Path to temporary directory

    Raises:
        OSError: If the directory cannot be created
    """
    try:
        temp_dir = Path(tempfile.mkdtemp(prefix=prefix, dir=parent))
        logger.debug(f"Created temporary directory: {temp_dir}")
        return temp_dir
    except OSError as exc:
        logger.error(f"Failed to create temporary directory: {exc}")
        raise


def remove_directory(path: str | Path) -> bool:
    """
    Recursively remove a directory, treating a missing directory as removed.

    Args:
        path: Directory to remove

    Returns:
        True if the directory was removed by this call, False if it was already gone

    Raises:
        OSError: If removal fails for any reason other than absence
    """
    path = Path(path)

    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        logger.debug(f"Directory already removed: {path}")
        return False

    logger.debug(f"Removed directory: {path}")
    return True


def write_file_bytes(path: str | Path, data: bytes) -> Path:
    """
    Write bytes to a file, flushing them to disk before returning.

    Args:
        path: Destination file path
        data: Bytes to write

    Returns:
        Path to the written file

    Raises:
        OSError: If the write fails
    """
    path = Path(path)

    try:
        with path.open("wb") as handle:
            handle.write(data)
            handle.flush()
        logger.debug(f"Wrote {len(data)} bytes to {path}")
        return path
    except OSError as exc:
        logger.error(f"Failed to write {path}: {exc}")
        raise

