"""Playlist store — reads and writes RetroArch .lpl files in the playlist directory."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from retroporter.errors import InvalidPlaylist, PackageWriteError, PlaylistNotFound
from retroporter.models.playlist import PLAYLIST_EXTENSION, Playlist


class PlaylistStore:
    """
    Playlist file manager.

    One file per playlist: ``{playlist_dir}/{name}.lpl``.
    """

    def __init__(self, playlist_dir: Path) -> None:
        self._dir = playlist_dir

    def path_for(self, name: str) -> Path:
        return self._dir / f"{name}{PLAYLIST_EXTENSION}"

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def load(self, name: str) -> Playlist:
        """Load a playlist by name."""
        path = self.path_for(name)
        if not path.is_file():
            raise PlaylistNotFound(name, path)
        try:
            with open(path, encoding="utf-8") as f:
                playlist = Playlist.from_json(f.read())
        except (OSError, ValueError, TypeError) as e:
            raise InvalidPlaylist(path, e) from e
        logger.debug(f"Loaded playlist {path.name} ({len(playlist.items)} items)")
        return playlist

    def save(self, name: str, playlist: Playlist) -> Path:
        """Persist a playlist, replacing any existing file atomically."""
        path = self.path_for(name)
        tmp = path.with_suffix(".tmp")
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(playlist.to_json())
            tmp.replace(path)
        except OSError as e:
            if tmp.exists():
                tmp.unlink(missing_ok=True)
            raise PackageWriteError(path, e) from e
        logger.debug(f"Saved playlist {path.name} ({len(playlist.items)} items)")
        return path
