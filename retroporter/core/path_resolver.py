"""RetroArch path resolver — locate the installation and resolve retroarch.cfg directory keys."""

from __future__ import annotations

import os
import platform
import re
from pathlib import Path

from loguru import logger

from retroporter.errors import ConfigurationError

CONFIG_FILENAME = "retroarch.cfg"

# Values starting with this marker are relative to the RetroArch installation.
RELATIVE_MARKER = ":"

_CFG_LINE = re.compile(r'^\s*([A-Za-z0-9_]+)\s*=\s*"?(.*?)"?\s*$')
_VDF_PATH = re.compile(r'"path"\s+"([^"]+)"')


def parse_retroarch_cfg(text: str) -> dict[str, str]:
    """Parse ``key = "value"`` lines from a retroarch.cfg file."""
    values: dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        match = _CFG_LINE.match(stripped)
        if match:
            values[match.group(1)] = match.group(2)
    return values


def _steam_roots() -> list[Path]:
    """Default Steam client locations for the current system."""
    system = platform.system()
    if system == "Windows":
        return [
            Path(os.environ.get("PROGRAMFILES(X86)", r"C:\Program Files (x86)")) / "Steam",
            Path(os.environ.get("PROGRAMFILES", r"C:\Program Files")) / "Steam",
        ]
    if system == "Darwin":
        return [Path.home() / "Library" / "Application Support" / "Steam"]
    return [
        Path.home() / ".steam" / "steam",
        Path.home() / ".local" / "share" / "Steam",
        Path.home() / ".var" / "app" / "com.valvesoftware.Steam" / ".local" / "share" / "Steam",
    ]


def _steam_library_folders(steam_root: Path) -> list[Path]:
    """All Steam library folders listed in ``libraryfolders.vdf`` (root included)."""
    libraries = [steam_root]
    vdf = steam_root / "steamapps" / "libraryfolders.vdf"
    if vdf.is_file():
        try:
            text = vdf.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug(f"Cannot read {vdf}: {e}")
            return libraries
        for raw in _VDF_PATH.findall(text):
            path = Path(raw.replace("\\\\", "\\"))
            if path not in libraries:
                libraries.append(path)
    return libraries


def _standalone_candidates() -> list[Path]:
    system = platform.system()
    if system == "Windows":
        return [
            Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming"))) / "RetroArch",
            Path(r"C:\RetroArch-Win64"),
        ]
    if system == "Darwin":
        return [Path.home() / "Library" / "Application Support" / "RetroArch"]
    config_home = Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config")))
    return [
        config_home / "retroarch",
        Path.home() / ".var" / "app" / "org.libretro.RetroArch" / "config" / "retroarch",
    ]


def candidate_install_dirs() -> list[Path]:
    """Steam installs first, then standalone installs."""
    candidates: list[Path] = []
    for root in _steam_roots():
        if not root.is_dir():
            continue
        for library in _steam_library_folders(root):
            candidates.append(library / "steamapps" / "common" / "RetroArch")
    candidates.extend(_standalone_candidates())
    return candidates


def locate_retroarch(override: Path | None = None, configured: str = "") -> Path:
    """
    Find the RetroArch installation directory.

    An explicit override or configured path wins and must contain
    retroarch.cfg; otherwise Steam libraries and standalone locations are probed.
    """
    explicit = override or (Path(configured) if configured else None)
    if explicit is not None:
        explicit = explicit.expanduser()
        if not (explicit / CONFIG_FILENAME).is_file():
            raise ConfigurationError(f"No {CONFIG_FILENAME} found in RetroArch path: {explicit}")
        return explicit

    for candidate in candidate_install_dirs():
        if (candidate / CONFIG_FILENAME).is_file():
            logger.debug(f"Detected RetroArch at {candidate}")
            return candidate

    raise ConfigurationError(
        "RetroArch installation not found; pass --retro-arch-path or set 'retroarch_path'"
    )


class RetroArchConfig:
    """Key/value view of retroarch.cfg with install-relative path rewriting."""

    def __init__(self, install_dir: Path, values: dict[str, str]) -> None:
        self._install_dir = install_dir
        self._values = values

    @classmethod
    def load(cls, install_dir: Path) -> RetroArchConfig:
        path = install_dir / CONFIG_FILENAME
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise ConfigurationError(f"Cannot read {path}: {e}") from e
        return cls(install_dir, parse_retroarch_cfg(text))

    def resolve(self, key: str) -> Path:
        """Absolute directory for a path-valued config key."""
        value = self._values.get(key, "").strip()
        if not value or value == "default":
            raise ConfigurationError(f"'{key}' is not set in {CONFIG_FILENAME}")
        return resolve_value(value, self._install_dir)


def resolve_value(value: str, install_dir: Path) -> Path:
    """Rewrite a marker-prefixed value relative to ``install_dir``; others are used verbatim."""
    if value.startswith(RELATIVE_MARKER):
        parts = [p for p in re.split(r"[\\/]", value[len(RELATIVE_MARKER) :]) if p]
        return install_dir.joinpath(*parts)
    return Path(value).expanduser()

