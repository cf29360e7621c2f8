"""Transfer package layout and in-memory contents."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from retroporter.models.playlist import PLAYLIST_EXTENSION, Playlist

PACKAGE_EXTENSION = ".zip"

PLAYLISTS_PREFIX = "playlists"
ROMS_PREFIX = "roms"
THUMBNAILS_PREFIX = "thumbnails"


class ThumbnailKind(StrEnum):
    """Thumbnail subdirectory names, identical to RetroArch's own layout."""

    BOXART = "Named_Boxarts"
    SNAP = "Named_Snaps"
    TITLE = "Named_Titles"


def playlist_entry(playlist_name: str) -> str:
    return f"{PLAYLISTS_PREFIX}/{playlist_name}{PLAYLIST_EXTENSION}"


def rom_entry(playlist_name: str, basename: str) -> str:
    return f"{ROMS_PREFIX}/{playlist_name}/{basename}"


def thumbnail_entry(playlist_name: str, kind: ThumbnailKind, filename: str) -> str:
    return f"{THUMBNAILS_PREFIX}/{playlist_name}/{kind}/{filename}"


@dataclass
class RomAsset:
    basename: str
    data: bytes


@dataclass
class ThumbnailAsset:
    kind: ThumbnailKind
    filename: str
    data: bytes


@dataclass
class PackageContents:
    """Everything read from a package in one pass, held in memory."""

    playlist_name: str
    playlist: Playlist
    rom: RomAsset | None = None
    thumbnails: dict[ThumbnailKind, ThumbnailAsset] = field(default_factory=dict)
