"""
Conversion engine invocation.

This module stages the input document in a workspace and runs the engine
headless against it, with an isolated profile, a deadline and support for
cooperative cancellation.
"""

import subprocess
import threading
from pathlib import Path

from loguru import logger

from makepdf.configs.engine import EngineSettings
from makepdf.exceptions import (
    ConversionCancelledError,
    EngineFailureError,
    EngineTimeoutError,
    WorkspaceError,
)
from makepdf.models.conversion import EngineRunOutcome
from makepdf.services.workspace import Workspace
from makepdf.utils.fs import write_file_bytes
from makepdf.utils.shell import CommandCancelledError, run_command_safely


def engine_format_argument(target_format: str) -> str:
    """
    Value of the engine's ``--convert-to`` flag for a target format.

    ``.pdf`` becomes ``pdf`` and ``.pdf:writer_pdf_Export`` becomes
    ``pdf:writer_pdf_Export``, so the engine names its output ``source.pdf``.
    """
    return target_format[1:] if target_format.startswith(".") else target_format


class ConversionInvoker:
    """Runs one engine process per conversion."""

    def __init__(self, settings: EngineSettings | None = None):
        """
        Initialize the invoker.

        Args:
            settings: Engine settings holding the deadline and poll interval
        """
        self.settings = settings or EngineSettings()

    def invoke(
        self,
        engine_path: Path,
        workspace: Workspace,
        document: bytes,
        target_format: str,
        cancel_event: threading.Event | None = None,
    ) -> EngineRunOutcome:
        """
        Stage the document and convert it.

        Args:
            engine_path: Path to the engine binary
            workspace: Open workspace for this run
            document: Raw input bytes
            target_format: Dot-prefixed target format
            cancel_event: Event that aborts the run when set

        Returns:
            EngineRunOutcome of the successful process

        Raises:
            WorkspaceError: If the input cannot be written
            EngineFailureError: If the engine exits nonzero or is killed
            EngineTimeoutError: If the engine outlives the deadline
            ConversionCancelledError: If cancel_event is set
        """
        self.stage_input(workspace, document)
        return self.run_engine(engine_path, workspace, target_format, cancel_event)

    def stage_input(self, workspace: Workspace, document: bytes) -> Path:
        """Write the input bytes to the workspace's fixed source file."""
        input_file = workspace.input_file
        try:
            return write_file_bytes(input_file, document)
        except OSError as exc:
            raise WorkspaceError(f"Failed to stage input: {exc}", str(input_file)) from exc

    def build_command(self, engine_path: Path, workspace: Workspace, target_format: str) -> list[str]:
        """
        Build the engine command line.

        Args:
            engine_path: Path to the engine binary
            workspace: Open workspace for this run
            target_format: Dot-prefixed target format

        Returns:
            Command list for subprocess execution
        """
        cmd = [str(engine_path)]

        # Per-run profile, concurrent engines must not share one
        cmd.append(f"-env:UserInstallation={workspace.profile_dir.as_uri()}")
        cmd.append("--headless")
        cmd.extend(["--convert-to", engine_format_argument(target_format)])
        cmd.extend(["--outdir", str(workspace.source_dir)])

        # Input file (must be last)
        cmd.append(str(workspace.input_file))

        return cmd

    def run_engine(
        self,
        engine_path: Path,
        workspace: Workspace,
        target_format: str,
        cancel_event: threading.Event | None = None,
    ) -> EngineRunOutcome:
        """Spawn the engine against the staged input and wait for it to exit."""
        cmd = self.build_command(engine_path, workspace, target_format)
        timeout = self.settings.conversion_timeout

        logger.info(f"Converting to {target_format} with {engine_path}")

        try:
            result = run_command_safely(
                cmd,
                cwd=workspace.source_dir,
                timeout=timeout,
                cancel_event=cancel_event,
                poll_interval=self.settings.poll_interval,
            )
        except subprocess.TimeoutExpired as exc:
            raise EngineTimeoutError(timeout) from exc
        except CommandCancelledError as exc:
            raise ConversionCancelledError() from exc
        except OSError as exc:
            logger.error(f"Could not start conversion engine {engine_path}: {exc}")
            raise EngineFailureError(None, stderr=str(exc), message=f"Could not start conversion engine: {exc}") from exc

        if result.returncode != 0:
            # Negative return codes are POSIX signal numbers
            signal = -result.returncode if result.returncode < 0 else None
            exit_code = None if signal is not None else result.returncode
            logger.error(
                f"Conversion engine failed (exit={exit_code}, signal={signal}): "
                f"{result.stderr.strip()[:500]}"
            )
            raise EngineFailureError(exit_code, signal, result.stdout, result.stderr)

        logger.info(f"Conversion engine finished in {result.duration:.2f}s")
        return EngineRunOutcome(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            duration_seconds=result.duration,
        )
