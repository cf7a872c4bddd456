"""
Disposable per-run workspaces.

A workspace is a pair of uniquely named temporary directories: a staging
directory for the input and output files, and an isolated engine profile
directory so concurrent engine processes never share user-install state.
"""

from pathlib import Path

from loguru import logger

from makepdf.exceptions import WorkspaceClosedError, WorkspaceError
from makepdf.utils.fs import create_temp_directory, ensure_directory, remove_directory

SOURCE_FILENAME = "source"


class Workspace:
    """Staging and profile directories owned by one conversion run."""

    SOURCE_PREFIX = "makepdf_source_"
    PROFILE_PREFIX = "makepdf_profile_"

    def __init__(self, source_dir: Path, profile_dir: Path):
        self._source_dir = source_dir
        self._profile_dir = profile_dir
        self._closed = False

    @classmethod
    def open(cls, temp_root: str | Path | None = None) -> "Workspace":
        """
        Create the two workspace directories.

        Args:
            temp_root: Parent directory, the system temp root when None

        Returns:
            An open Workspace

        Raises:
            WorkspaceError: If either directory cannot be created
        """
        try:
            if temp_root is not None:
                ensure_directory(temp_root)
            source_dir = create_temp_directory(prefix=cls.SOURCE_PREFIX, parent=temp_root)
        except OSError as exc:
            raise WorkspaceError(f"Failed to create staging directory: {exc}", str(temp_root)) from exc

        try:
            profile_dir = create_temp_directory(prefix=cls.PROFILE_PREFIX, parent=temp_root)
        except OSError as exc:
            _remove_quietly(source_dir)
            raise WorkspaceError(f"Failed to create profile directory: {exc}", str(temp_root)) from exc

        logger.debug(f"Workspace opened: source={source_dir} profile={profile_dir}")
        return cls(source_dir, profile_dir)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def source_dir(self) -> Path:
        """Staging directory holding the input and the produced output."""
        self._check_open()
        return self._source_dir

    @property
    def profile_dir(self) -> Path:
        """Isolated engine user-profile directory."""
        self._check_open()
        return self._profile_dir

    @property
    def input_file(self) -> Path:
        return self.source_dir / SOURCE_FILENAME

    def output_file(self, extension: str) -> Path:
        return self.source_dir / f"{SOURCE_FILENAME}.{extension}"

    def close(self) -> None:
        """
        Remove both directories and their contents.

        Safe to call repeatedly. Removal errors are logged, never raised.
        """
        if self._closed:
            return
        self._closed = True

        for directory in (self._source_dir, self._profile_dir):
            _remove_quietly(directory)
        logger.debug(f"Workspace closed: {self._source_dir.name}, {self._profile_dir.name}")

    def _check_open(self) -> None:
        if self._closed:
            raise WorkspaceClosedError(str(self._source_dir))

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"Workspace(source_dir={self._source_dir!s}, profile_dir={self._profile_dir!s}, {state})"


def _remove_quietly(directory: Path) -> None:
    try:
        remove_directory(directory)
    except OSError as exc:
        logger.warning(f"Failed to remove workspace directory {directory}: {exc}")
