"""
Output retrieval with a bounded retry window.

The engine can exit before its output file is visible on disk (buffered
writes, virus scanners holding the file), so the expected output is read
a few times with a short pause in between before giving up.
"""

import time
from pathlib import Path

from loguru import logger

from makepdf.configs.engine import EngineSettings
from makepdf.exceptions import ReadFailureError
from makepdf.services.workspace import Workspace


def output_extension(target_format: str) -> str:
    """
    Extension of the file the engine writes for a target format.

    The engine filter qualifier is dropped: ``.pdf:writer_pdf_Export`` -> ``pdf``.
    """
    return target_format.lstrip(".").split(":")[0]


class OutputRetriever:
    """Reads a run's output file, tolerating a short visibility delay."""

    def __init__(self, attempts: int | None = None, interval: float | None = None, settings: EngineSettings | None = None):
        settings = settings or EngineSettings()
        self.attempts = attempts if attempts is not None else settings.retrieval_attempts
        self.interval = interval if interval is not None else settings.retrieval_interval
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")

    def retrieve(self, workspace: Workspace, target_format: str) -> bytes:
        """
        Read the converted output of a run.

        Args:
            workspace: Workspace the engine wrote into
            target_format: Dot-prefixed target format of the run

        Returns:
            Output file bytes

        Raises:
            ReadFailureError: If the file is still missing or empty after all attempts
        """
        path = workspace.output_file(output_extension(target_format))
        last_error: str | None = None

        for attempt in range(1, self.attempts + 1):
            data = None
            try:
                data = self._read(path)
            except OSError as exc:
                last_error = str(exc)

            if data:
                logger.debug(f"Read {len(data)} bytes from {path.name} on attempt {attempt}")
                return data
            if data is not None:
                last_error = "output file is empty"

            if attempt < self.attempts:
                logger.warning(
                    f"Output not ready (attempt {attempt}/{self.attempts}), "
                    f"retrying in {self.interval}s: {last_error}"
                )
                time.sleep(self.interval)

        logger.error(f"Output never materialized after {self.attempts} attempts: {path}")
        raise ReadFailureError(str(path), self.attempts, last_error)

    def _read(self, path: Path) -> bytes:
        return path.read_bytes()
