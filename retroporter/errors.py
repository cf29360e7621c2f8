"""Error taxonomy — every failure the CLI reports as fatal derives from RetroPorterError."""

from __future__ import annotations

from pathlib import Path


class RetroPorterError(Exception):
    """Base class for all user-facing failures."""


class ConfigurationError(RetroPorterError):
    """RetroArch installation or retroarch.cfg missing, unreadable or incomplete."""


class PlaylistNotFound(RetroPorterError):
    def __init__(self, name: str, path: Path) -> None:
        super().__init__(f"Playlist '{name}' not found: {path}")
        self.name = name
        self.path = path


class InvalidPlaylist(RetroPorterError):
    def __init__(self, path: Path, reason: object) -> None:
        super().__init__(f"Invalid playlist file {path}: {reason}")
        self.path = path


class RecordNotFound(RetroPorterError):
    def __init__(self, playlist: str, label: str) -> None:
        super().__init__(f"No game labelled '{label}' in playlist '{playlist}'")
        self.playlist = playlist
        self.label = label


class InvalidPackage(RetroPorterError):
    def __init__(self, path: Path, reason: object) -> None:
        super().__init__(f"Invalid package {path}: {reason}")
        self.path = path


class EmptyPackage(RetroPorterError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Package {path} contains a playlist without games")
        self.path = path


class PackageWriteError(RetroPorterError):
    def __init__(self, path: Path, reason: object) -> None:
        super().__init__(f"Failed to write {path}: {reason}")
        self.path = path


class ArchiveReadError(RetroPorterError):
    def __init__(self, path: Path, reason: object) -> None:
        super().__init__(f"Failed to read archive {path}: {reason}")
        self.path = path


class DownloadError(RetroPorterError):
    def __init__(self, url: str, reason: object) -> None:
        super().__init__(f"Download failed for {url}: {reason}")
        self.url = url
