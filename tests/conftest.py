"""
Shared fixtures for the MakePDF tests.
"""

import sys
from pathlib import Path

import pytest

from makepdf.configs.engine import EngineSettings

# Stand-in for soffice: records its arguments next to itself, then writes
# PDF-OK to <outdir>/source.<ext> the way the real engine names its output.
SUCCESS_ENGINE = """
printf '%s\\n' "$@" > "$(dirname "$0")/args.txt"
outdir=""
format=""
while [ $# -gt 0 ]; do
  case "$1" in
    --outdir) outdir="$2"; shift 2 ;;
    --convert-to) format="$2"; shift 2 ;;
    *) shift ;;
  esac
done
printf '%s' "PDF-OK" > "$outdir/source.${format%%:*}"
exit 0
"""

FAILING_ENGINE = """
echo "Error: source file could not be loaded" >&2
exit 1
"""

SILENT_ENGINE = """
exit 0
"""

# Single process that never finishes
HANGING_ENGINE = """
exec sleep 30
"""

# Launcher that waits on a helper process, the way soffice waits on soffice.bin;
# the helper inherits the output pipes
FORKING_ENGINE = """
sleep 30 &
wait
"""

SIGNALLED_ENGINE = """
kill -9 $$
"""

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="stub engines are POSIX shell scripts")


@pytest.fixture
def stub_engine(tmp_path):
    """Factory writing an executable stub engine script and returning its path."""

    def _make(body: str) -> Path:
        engine_dir = tmp_path / "engine"
        engine_dir.mkdir(exist_ok=True)
        path = engine_dir / "soffice"
        path.write_text("#!/bin/sh\n" + body)
        path.chmod(0o755)
        return path

    return _make


@pytest.fixture
def workspace_root(tmp_path) -> Path:
    """Directory that holds every workspace a test opens."""
    return tmp_path / "workspaces"


@pytest.fixture
def engine_settings(workspace_root) -> EngineSettings:
    """Engine settings with fast timings and an isolated workspace root."""
    return EngineSettings(
        office_path="/opt/libreoffice",
        conversion_timeout=10,
        poll_interval=0.05,
        retrieval_attempts=3,
        retrieval_interval=0.01,
        temp_root=workspace_root,
    )


def leftovers(root: Path) -> list[Path]:
    """Anything still present under a workspace root."""
    if not root.exists():
        return []
    return list(root.iterdir())
