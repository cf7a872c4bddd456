"""
Tests for the conversion engine locator.
"""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from makepdf.configs.engine import EngineSettings
from makepdf.exceptions import BinaryNotFoundError, ErrorTypes, UnsupportedPlatformError
from makepdf.services.locator import BinaryLocator, HostPlatform


def _settings(**overrides) -> EngineSettings:
    values = {
        "office_path": "/opt/libreoffice",
        "program_files": "C:\\Program Files",
        "program_files_x86": "C:\\Program Files (x86)",
    }
    values.update(overrides)
    return EngineSettings(**values)


class TestHostPlatform:
    """Test platform identifier resolution."""

    @pytest.mark.parametrize(
        "identifier, expected",
        [
            ("darwin", HostPlatform.DARWIN),
            ("linux", HostPlatform.LINUX),
            ("win32", HostPlatform.WINDOWS),
        ],
    )
    def test_resolve_supported(self, identifier, expected):
        """Test supported identifiers map onto the enum."""
        assert HostPlatform.resolve(identifier) is expected

    @pytest.mark.parametrize("identifier", ["sunos5", "freebsd13", "cygwin", "aix", ""])
    def test_resolve_unsupported(self, identifier):
        """Test anything else is rejected."""
        with pytest.raises(UnsupportedPlatformError) as exc_info:
            HostPlatform.resolve(identifier)
        assert exc_info.value.error_type == ErrorTypes.UNSUPPORTED_PLATFORM
        assert exc_info.value.details["platform"] == identifier

    def test_current_reads_sys_platform(self):
        """Test the running host is read from sys.platform."""
        with patch("makepdf.services.locator.sys.platform", "darwin"):
            assert HostPlatform.current() is HostPlatform.DARWIN


class TestCandidates:
    """Test the per-platform candidate lists."""

    def test_macos_candidates(self):
        """Test macOS looks in the application bundle."""
        locator = BinaryLocator(_settings())
        assert locator.candidates("darwin") == [
            Path("/Applications/LibreOffice.app/Contents/MacOS/soffice")
        ]

    def test_linux_default_candidates(self):
        """Test the default Linux list has no duplicate launcher."""
        locator = BinaryLocator(_settings())
        assert [str(p) for p in locator.candidates("linux")] == [
            "/usr/bin/libreoffice",
            "/opt/libreoffice/program/soffice",
            "/usr/bin/soffice",
            "/snap/bin/libreoffice",
        ]

    def test_linux_override_comes_first(self):
        """Test a vendor install directory maps onto its /usr/bin launcher."""
        locator = BinaryLocator(_settings(office_path="/opt/libreoffice7.6"))
        candidates = [str(p) for p in locator.candidates("linux")]
        assert candidates[:2] == [
            "/usr/bin/libreoffice7.6",
            "/opt/libreoffice7.6/program/soffice",
        ]
        assert candidates[2:] == ["/usr/bin/libreoffice", "/usr/bin/soffice", "/snap/bin/libreoffice"]

    def test_linux_override_outside_opt(self):
        """Test an install path outside /opt contributes only its program binary."""
        locator = BinaryLocator(_settings(office_path="/usr/local/lib/libreoffice"))
        assert [str(p) for p in locator.candidates("linux")] == [
            "/usr/local/lib/libreoffice/program/soffice",
            "/usr/bin/libreoffice",
            "/usr/bin/soffice",
            "/snap/bin/libreoffice",
        ]

    def test_windows_candidates(self):
        """Test Windows prefers the x86 Program Files directory."""
        locator = BinaryLocator(_settings())
        candidates = [str(p) for p in locator.candidates("win32")]
        assert candidates == [
            "C:\\Program Files (x86)\\LIBREO~1\\program\\soffice.exe",
            "C:\\Program Files (x86)\\LibreOffice\\program\\soffice.exe",
            "C:\\Program Files\\LibreOffice\\program\\soffice.exe",
        ]


class TestLocate:
    """Test engine resolution against a faked filesystem."""

    @pytest.mark.parametrize("platform", ["darwin", "linux", "win32"])
    def test_returns_the_single_existing_candidate(self, platform):
        """Test each candidate position is found when it alone exists."""
        candidates = BinaryLocator(_settings()).candidates(platform)

        for expected in candidates:
            locator = BinaryLocator(_settings(), exists=lambda p, hit=expected: p == hit)
            assert locator.locate(platform) == expected

    def test_first_existing_candidate_wins(self):
        """Test preference order when several installs exist."""
        locator = BinaryLocator(
            _settings(),
            exists=lambda p: str(p) in ("/usr/bin/soffice", "/snap/bin/libreoffice"),
        )
        assert locator.locate("linux") == Path("/usr/bin/soffice")

    def test_checks_stop_at_first_match(self):
        """Test later candidates are not checked after a hit."""
        exists = Mock(side_effect=lambda p: str(p) == "/usr/bin/libreoffice")
        locator = BinaryLocator(_settings(), exists=exists)

        locator.locate("linux")

        exists.assert_called_once_with(Path("/usr/bin/libreoffice"))

    def test_not_found(self):
        """Test a missing engine lists every candidate tried."""
        locator = BinaryLocator(_settings(), exists=lambda p: False)

        with pytest.raises(BinaryNotFoundError) as exc_info:
            locator.locate("darwin")

        assert exc_info.value.error_type == ErrorTypes.BINARY_NOT_FOUND
        assert exc_info.value.details["candidates"] == [
            "/Applications/LibreOffice.app/Contents/MacOS/soffice"
        ]

    @pytest.mark.parametrize("platform", ["sunos5", "openbsd7", "emscripten"])
    def test_unsupported_platform_never_touches_filesystem(self, platform):
        """Test unsupported platforms fail before any existence check."""
        exists = Mock(return_value=True)
        locator = BinaryLocator(_settings(), exists=exists)

        with pytest.raises(UnsupportedPlatformError):
            locator.locate(platform)

        exists.assert_not_called()

    def test_defaults_to_running_host(self):
        """Test locate without a platform uses sys.platform."""
        locator = BinaryLocator(_settings(), exists=lambda p: True)
        with patch("makepdf.services.locator.sys.platform", "darwin"):
            assert locator.locate() == Path("/Applications/LibreOffice.app/Contents/MacOS/soffice")

    def test_real_filesystem_check(self, tmp_path):
        """Test the default existence check uses the real filesystem."""
        install_dir = tmp_path / "libreoffice"
        launcher = install_dir / "program" / "soffice"
        launcher.parent.mkdir(parents=True)
        launcher.write_text("")

        locator = BinaryLocator(_settings(office_path=str(install_dir)))

        assert locator.locate("linux") == launcher
