"""Discovery of external encoder executables."""

from __future__ import annotations

import logging
import os
import re
import sys
import threading
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from ..config.constants import UPWARD_SEARCH_DEPTH, VENDOR_DIR_NAMES

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ..config import MediaOptimizerConfig

LOG = logging.getLogger(__name__)

DEFAULT_ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets"

_VERSION_RE = re.compile(r"(\d+)")


class ToolId(Enum):
    """External tools the pipeline shells out to."""

    FFMPEG = "ffmpeg"
    GHOSTSCRIPT = "ghostscript"

    @property
    def display_name(self) -> str:
        """Human readable tool name."""
        return "FFmpeg" if self == ToolId.FFMPEG else "Ghostscript"


def _version_key(path: Path) -> tuple[int, ...]:
    """Sort key for install directories named after a version, e.g. ``gs10.04.0``."""
    return tuple(int(part) for part in _VERSION_RE.findall(path.name))


class ToolLocator:
    """
    Resolve the filesystem path of an external tool.

    Search order, first executable match wins:

    1. explicit override from configuration
    2. bundled asset directory
    3. well-known per-OS installation directories
    4. ``vendor``/``bin``/``tools`` directories found walking up from the
       package (bounded depth)
    5. common package-manager prefixes
    6. the bare executable name, left for PATH lookup when the process starts

    Found paths are cached per tool and re-checked on every read. A cached path
    that no longer exists triggers a fresh search. The cache is guarded by a
    lock so one locator can be shared between threads.
    """

    def __init__(
        self,
        *,
        overrides: dict[str, str] | None = None,
        assets_dir: Path | None = None,
        start_dir: Path | None = None,
        platform: str | None = None,
        max_depth: int = UPWARD_SEARCH_DEPTH,
    ) -> None:
        self.overrides = dict(overrides or {})
        self.assets_dir = assets_dir if assets_dir is not None else DEFAULT_ASSETS_DIR
        self.start_dir = start_dir if start_dir is not None else Path(__file__).resolve().parent
        self.platform = platform or sys.platform
        self.max_depth = max_depth
        self._cache: dict[ToolId, Path] = {}
        self._tried: dict[ToolId, list[str]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: MediaOptimizerConfig) -> ToolLocator:
        """Build a locator from the ``tools`` configuration section."""
        assets_dir = Path(config.tools.assets_dir) if config.tools.assets_dir else None
        return cls(overrides=config.tools.overrides(), assets_dir=assets_dir)

    @property
    def is_windows(self) -> bool:
        """Whether the target platform is Windows."""
        return self.platform.startswith("win")

    def executable_name(self, tool: ToolId) -> str:
        """File name of the tool's executable on this platform."""
        if tool == ToolId.FFMPEG:
            return "ffmpeg.exe" if self.is_windows else "ffmpeg"
        return "gswin64c.exe" if self.is_windows else "gs"

    def bare_name(self, tool: ToolId) -> str:
        """Name handed to the OS loader when no candidate path exists."""
        if tool == ToolId.FFMPEG:
            return "ffmpeg"
        return "gswin64c" if self.is_windows else "gs"

    def resolve(self, tool: ToolId) -> str:
        """Return a path for the tool. Never fails; falls back to the bare name."""
        with self._lock:
            cached = self._cache.get(tool)
            if cached is not None:
                if self._is_executable(cached):
                    return str(cached)
                LOG.info("Cached %s path no longer exists, searching again: %s", tool.display_name, cached)
                del self._cache[tool]

            tried: list[str] = []
            for candidate in self.candidates(tool):
                tried.append(str(candidate))
                if self._is_executable(candidate):
                    LOG.debug("Resolved %s to %s", tool.display_name, candidate)
                    self._cache[tool] = candidate
                    self._tried[tool] = tried
                    return str(candidate)

            fallback = self.bare_name(tool)
            tried.append(fallback)
            self._tried[tool] = tried
            LOG.debug("No %s executable found in known locations, using PATH lookup", tool.display_name)
            return fallback

    def tried_paths(self, tool: ToolId) -> list[str]:
        """Locations checked during the most recent search for a tool."""
        with self._lock:
            return list(self._tried.get(tool, []))

    def invalidate(self, tool: ToolId | None = None) -> None:
        """Drop cached paths (one tool or all)."""
        with self._lock:
            if tool is None:
                self._cache.clear()
            else:
                self._cache.pop(tool, None)

    def candidates(self, tool: ToolId) -> Iterator[Path]:
        """Yield candidate paths in priority order."""
        override = self.overrides.get(tool.value)
        if override:
            yield Path(override).expanduser()

        exe = self.executable_name(tool)
        yield self.assets_dir / exe
        yield from self._system_candidates(tool)
        yield from self._vendored_candidates(exe)
        yield from (prefix / exe for prefix in self._package_manager_prefixes())

    def _system_candidates(self, tool: ToolId) -> Iterator[Path]:
        """Well-known installation directories for the target OS."""
        exe = self.executable_name(tool)
        if self.is_windows:
            program_dirs = [Path("C:\\Program Files"), Path("C:\\Program Files (x86)")]
            if tool == ToolId.GHOSTSCRIPT:
                # Ghostscript installs into a versioned directory, newest first
                for base in program_dirs:
                    gs_root = base / "gs"
                    if gs_root.is_dir():
                        for version_dir in sorted(gs_root.glob("gs*"), key=_version_key, reverse=True):
                            yield version_dir / "bin" / exe
            else:
                for base in program_dirs:
                    yield base / "ffmpeg" / "bin" / exe
                yield Path("C:\\ffmpeg\\bin") / exe
        elif self.platform == "darwin":
            formula = "ffmpeg" if tool == ToolId.FFMPEG else "ghostscript"
            for prefix in (Path("/opt/homebrew/opt"), Path("/usr/local/opt")):
                yield prefix / formula / "bin" / exe

    def _vendored_candidates(self, exe: str) -> Iterator[Path]:
        """Walk up from the start directory looking for a vendored copy."""
        current = self.start_dir
        for _ in range(self.max_depth + 1):
            for dir_name in VENDOR_DIR_NAMES:
                yield current / dir_name / exe
            if current.parent == current:
                break
            current = current.parent

    def _package_manager_prefixes(self) -> list[Path]:
        """Install prefixes used by common package managers."""
        if self.is_windows:
            prefixes = [Path("C:\\ProgramData\\chocolatey\\bin")]
            user_profile = os.environ.get("USERPROFILE")
            if user_profile:
                prefixes.append(Path(user_profile) / "scoop" / "shims")
            local_app_data = os.environ.get("LOCALAPPDATA")
            if local_app_data:
                prefixes.append(Path(local_app_data) / "Microsoft" / "WinGet" / "Links")
            return prefixes
        return [
            Path("/opt/homebrew/bin"),  # Homebrew (Apple Silicon)
            Path("/usr/local/bin"),  # Homebrew (Intel), manual installs
            Path("/usr/bin"),
            Path("/opt/local/bin"),  # MacPorts
            Path("/home/linuxbrew/.linuxbrew/bin"),
            Path("/snap/bin"),
        ]

    def _is_executable(self, path: Path) -> bool:
        try:
            if not path.is_file():
                return False
        except OSError:
            return False
        return self.is_windows or os.access(path, os.X_OK)
