"""
Conversion engine locator.

Finds the installed LibreOffice ``soffice`` binary by testing a short,
platform-specific list of conventional install paths in preference order:
vendor app bundle or package first, then distro packages, then snap.
"""

import sys
from collections.abc import Callable
from enum import Enum
from pathlib import Path, PurePosixPath, PureWindowsPath

from loguru import logger

from makepdf.configs.engine import EngineSettings
from makepdf.exceptions import BinaryNotFoundError, UnsupportedPlatformError


class HostPlatform(str, Enum):
    """Operating systems with a known engine layout, keyed by ``sys.platform``."""

    DARWIN = "darwin"
    LINUX = "linux"
    WINDOWS = "win32"

    @classmethod
    def resolve(cls, platform: "str | HostPlatform") -> "HostPlatform":
        """
        Map a platform identifier onto a supported platform.

        Raises:
            UnsupportedPlatformError: If the identifier is not darwin, linux or win32
        """
        if isinstance(platform, HostPlatform):
            return platform
        if platform.startswith("linux"):
            return cls.LINUX
        try:
            return cls(platform)
        except ValueError:
            raise UnsupportedPlatformError(platform) from None

    @classmethod
    def current(cls) -> "HostPlatform":
        return cls.resolve(sys.platform)


class BinaryLocator:
    """Resolves the engine path for a host platform."""

    MACOS_BUNDLE = "/Applications/LibreOffice.app/Contents/MacOS/soffice"
    LINUX_PACKAGES = ("/usr/bin/libreoffice", "/usr/bin/soffice", "/snap/bin/libreoffice")

    def __init__(
        self,
        settings: EngineSettings | None = None,
        exists: Callable[[Path], bool] | None = None,
    ):
        """
        Initialize the locator.

        Args:
            settings: Engine settings holding the overridable install paths
            exists: Existence check for a candidate, ``Path.exists`` by default
        """
        self.settings = settings or EngineSettings()
        self._exists = exists or Path.exists

    def candidates(self, platform: str | HostPlatform) -> list[Path]:
        """
        Return the ordered candidate paths for a platform.

        Raises:
            UnsupportedPlatformError: If the platform is not supported
        """
        host = HostPlatform.resolve(platform)

        if host is HostPlatform.DARWIN:
            paths = [self.MACOS_BUNDLE]
        elif host is HostPlatform.LINUX:
            paths = [*self._linux_install_paths(), *self.LINUX_PACKAGES]
        else:
            x86 = PureWindowsPath(self.settings.program_files_x86)
            native = PureWindowsPath(self.settings.program_files)
            paths = [
                str(x86 / "LIBREO~1" / "program" / "soffice.exe"),
                str(x86 / "LibreOffice" / "program" / "soffice.exe"),
                str(native / "LibreOffice" / "program" / "soffice.exe"),
            ]

        # dict keeps first-seen order
        return [Path(p) for p in dict.fromkeys(paths)]

    def _linux_install_paths(self) -> list[str]:
        """
        Launcher and program paths of a vendor package install.

        Vendor packages install into ``/opt/libreofficeX.Y`` and link a
        launcher of the same name into ``/usr/bin``.
        """
        install_dir = PurePosixPath(self.settings.office_path)
        paths = [str(install_dir / "program" / "soffice")]
        if install_dir.parts[:2] == ("/", "opt") and len(install_dir.parts) > 2:
            paths.insert(0, str(PurePosixPath("/usr/bin", *install_dir.parts[2:])))
        return paths

    def locate(self, platform: str | HostPlatform | None = None) -> Path:
        """
        Return the first existing candidate for the platform.

        Args:
            platform: Platform identifier, the running host when None

        Returns:
            Path to the engine binary

        Raises:
            UnsupportedPlatformError: If the platform is not supported
            BinaryNotFoundError: If no candidate exists
        """
        host = HostPlatform.current() if platform is None else HostPlatform.resolve(platform)
        candidates = self.candidates(host)

        for candidate in candidates:
            if self._exists(candidate):
                logger.debug(f"Conversion engine found: {candidate}")
                return candidate
            logger.debug(f"Conversion engine not at: {candidate}")

        logger.error(f"No conversion engine found on {host.value}")
        raise BinaryNotFoundError(host.value, [str(c) for c in candidates])
