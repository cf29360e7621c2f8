"""Application context — service container handed to every command."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from retroporter.config import Config
    from retroporter.core.path_resolver import RetroArchConfig
    from retroporter.core.progress import ProgressFactory


@dataclass
class AppContext:
    """
    Central service container.

    Commands receive this instead of reaching for module-level state; the
    RetroArch directories are resolved from ``retroarch`` on demand so a
    command only fails on the keys it actually needs.
    """

    config: Config
    retroarch: RetroArchConfig
    progress: ProgressFactory

    @property
    def playlists_dir(self) -> Path:
        return self.retroarch.resolve("playlist_directory")

    @property
    def thumbnails_dir(self) -> Path:
        return self.retroarch.resolve("thumbnails_directory")

    @property
    def cores_dir(self) -> Path:
        return self.retroarch.resolve("libretro_directory")

    @property
    def core_info_dir(self) -> Path:
        return self.retroarch.resolve("libretro_info_path")
