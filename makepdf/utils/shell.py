"""
Shell utilities for safe subprocess execution.

This module runs external programs without a shell, captures their output
for diagnostics, enforces a deadline and honours a cancellation token.
"""

import os
import signal
import subprocess
import threading
import time
from pathlib import Path
from typing import NamedTuple

from loguru import logger

# How long to wait for pipes to drain after killing a process
KILL_GRACE_SECONDS = 5.0


class CommandResult(NamedTuple):
    """Result of a command execution."""
    returncode: int
    stdout: str
    stderr: str
    duration: float = 0.0


class CommandCancelledError(Exception):
    """Raised when a running command is cancelled through its cancel event."""

    def __init__(self, cmd: list[str], stdout: str = "", stderr: str = ""):
        super().__init__(f"Command cancelled: {cmd[0] if cmd else ''}")
        self.cmd = cmd
        self.stdout = stdout
        self.stderr = stderr


def run_command_safely(
    cmd: list[str],
    cwd: Path | None = None,
    timeout: float = 300,
    env: dict[str, str] | None = None,
    cancel_event: threading.Event | None = None,
    poll_interval: float = 0.1,
) -> CommandResult:
    """
    Run a command with output capture, a deadline and cooperative cancellation.

    Args:
        cmd: Command to run as list of strings
        cwd: Working directory for the command
        timeout: Timeout in seconds (default: 5 minutes)
        env: Environment variables (inherits the current environment when None)
        cancel_event: Event that kills the process when set
        poll_interval: How often the cancel event is checked, in seconds

    Returns:
        CommandResult with return code, output and duration

    Raises:
        subprocess.TimeoutExpired: If command times out (the process is killed)
        CommandCancelledError: If cancel_event is set while the command runs
        ValueError: If the command is malformed
        OSError: If the program cannot be started
    """
    _validate_command(cmd)

    if env is None:
        env = os.environ.copy()

    logger.debug(f"Running command: {' '.join(cmd)}")
    if cwd:
        logger.debug(f"Working directory: {cwd}")

    start = time.monotonic()
    deadline = start + timeout
    process = subprocess.Popen(
        cmd,
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        errors="replace",
        env=env,
        # Own process group, so a kill reaches helpers the program spawns
        start_new_session=True,
    )

    while True:
        remaining = deadline - time.monotonic()
        try:
            stdout, stderr = process.communicate(timeout=max(0.0, min(poll_interval, remaining)))
            break
        except subprocess.TimeoutExpired:
            if cancel_event is not None and cancel_event.is_set():
                stdout, stderr = _kill(process)
                logger.warning(f"Command cancelled: {' '.join(cmd)}")
                raise CommandCancelledError(cmd, stdout, stderr) from None
            if time.monotonic() >= deadline:
                stdout, stderr = _kill(process)
                logger.error(f"Command timed out after {timeout}s: {' '.join(cmd)}")
                raise subprocess.TimeoutExpired(cmd, timeout, output=stdout, stderr=stderr) from None

    duration = time.monotonic() - start
    logger.debug(f"Command completed with return code: {process.returncode} in {duration:.2f}s")
    if stdout:
        logger.debug(f"STDOUT: {stdout[:200]}...")
    if stderr:
        logger.debug(f"STDERR: {stderr[:200]}...")

    return CommandResult(
        returncode=process.returncode,
        stdout=stdout or "",
        stderr=stderr or "",
        duration=duration,
    )


def _kill(process: subprocess.Popen) -> tuple[str, str]:
    """Kill a process with its whole process group and collect whatever output it produced."""
    if os.name == "posix":
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            logger.debug(f"Process group {process.pid} already gone")
    else:
        process.kill()

    try:
        stdout, stderr = process.communicate(timeout=KILL_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        # A descendant outside the group still holds the pipes
        logger.warning(f"Output pipes of {process.pid} still open after kill, abandoning them")
        for pipe in (process.stdout, process.stderr):
            if pipe is not None:
                pipe.close()
        process.wait()
        return "", ""
    return stdout or "", stderr or ""


def _validate_command(cmd: list[str]) -> None:
    """
    Validate the command is a non-empty list of plain string arguments.

    Args:
        cmd: Command to validate

    Raises:
        ValueError: If the command is malformed
    """
    if not cmd:
        raise ValueError("Command must not be empty")

    for part in cmd:
        if not isinstance(part, str):
            raise ValueError(f"Command arguments must be strings, got {type(part).__name__}")
        if "\x00" in part:
            raise ValueError("Command arguments must not contain NUL bytes")


def get_command_version(cmd: str, version_flag: str = "--version", args: list[str] | None = None) -> str | None:
    """
    Get version information for a command.

    Args:
        cmd: Command to check
        version_flag: Flag to get version (default: --version)
        args: Extra arguments placed before the version flag

    Returns:
        Version string or None if not available
    """
    try:
        result = run_command_safely([cmd, *(args or []), version_flag], timeout=30)
    except (OSError, ValueError, subprocess.TimeoutExpired) as exc:
        logger.debug(f"Could not read version of {cmd}: {exc}")
        return None
    if result.returncode == 0:
        return result.stdout.strip()
    return None
