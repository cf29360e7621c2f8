"""Application configuration — JSON-based, merged over built-in defaults."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

_instance: "Config | None" = None

# Default data directory
_DEFAULT_DATA_DIR = Path.home() / "Documents" / "RetroPorter"


def get_config() -> Config:
    """Module-level factory — single global Config instance."""
    global _instance
    if _instance is None:
        _instance = Config()
    return _instance


def reset_config() -> None:
    """Reset the global config instance (for testing)."""
    global _instance
    _instance = None


class Config:
    """
    JSON-based application configuration.

    ``config.json`` in the data directory is edited by hand; the CLI only
    reads it, merged over ``_DEFAULTS``.
    """

    _DEFAULTS: dict[str, Any] = {
        # RetroArch installation (empty = detect via Steam / standard locations)
        "retroarch_path": "",
        # Root under which newly created playlists get their content directory
        "import_root": "",
        # Streaming chunk size for package and archive I/O
        "chunk_size": 64 * 1024,
        # Core updater
        "core_version": "nightly",
        "buildbot_url": "http://buildbot.libretro.com",
        "info_url": "https://buildbot.libretro.com/assets/frontend/info.zip",
        "network": {
            "proxy_protocol": "http",
            "proxy_host": "",
            "proxy_port": "",
            "timeout": 60,
        },
    }

    def __init__(self, config_dir: Path | None = None) -> None:
        self._data: dict[str, Any] = {}
        self._dir = config_dir or _DEFAULT_DATA_DIR
        self._path = self._dir / "config.json"
        self._load()

    def _load(self) -> None:
        """Load config from disk, merging with defaults."""
        self._data = json.loads(json.dumps(self._DEFAULTS))  # deep copy defaults
        if self._path.exists():
            try:
                with open(self._path, encoding="utf-8") as f:
                    user_data = json.load(f)
                self._deep_merge(self._data, user_data)
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Failed to load config, using defaults: {e}")

    def _deep_merge(self, base: dict, override: dict) -> None:
        """Recursively merge override into base."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    @property
    def data_dir(self) -> Path:
        return self._dir

    @property
    def retroarch_path(self) -> str:
        return self._data.get("retroarch_path", "")

    @property
    def import_root(self) -> Path:
        raw = self._data.get("import_root", "")
        if raw:
            return Path(raw)
        return self._dir / "roms"

    @property
    def chunk_size(self) -> int:
        return max(1, int(self._data.get("chunk_size", 64 * 1024)))

    @property
    def core_version(self) -> str:
        return self._data.get("core_version", "nightly")

    @property
    def buildbot_url(self) -> str:
        return self._data.get("buildbot_url", "").rstrip("/")

    @property
    def info_url(self) -> str:
        return self._data.get("info_url", "")

    @property
    def network_config(self) -> dict[str, Any]:
        return self._data.get("network", {})

    @property
    def proxy_url(self) -> str:
        """Assemble proxy URL from network fields (protocol/host/port)."""
        net = self.network_config
        host = net.get("proxy_host", "")
        if not host:
            return ""
        proto = net.get("proxy_protocol", "http")
        port = net.get("proxy_port", "")
        return f"{proto}://{host}:{port}" if port else f"{proto}://{host}"

    @property
    def http_timeout(self) -> float:
        return float(self.network_config.get("timeout", 60))
