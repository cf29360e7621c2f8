"""Package builder — export one playlist entry with its rom and thumbnails into a ZIP package."""

from __future__ import annotations

import zipfile
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from retroporter.core.progress import ProgressFactory, Reporter, TransferReporter
from retroporter.data.playlist_store import PlaylistStore
from retroporter.errors import PackageWriteError, RecordNotFound
from retroporter.models.package import (
    PACKAGE_EXTENSION,
    ThumbnailKind,
    playlist_entry,
    rom_entry,
    thumbnail_entry,
)
from retroporter.utils import format_size, thumbnail_name

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class _FileEntry:
    """A file on disk destined for one package entry."""

    source: Path
    arcname: str
    size: int


def thumbnail_path(thumbnails_dir: Path, playlist_name: str, kind: ThumbnailKind, label: str) -> Path:
    """Where RetroArch keeps a thumbnail of the given kind for an entry."""
    return thumbnails_dir / playlist_name / kind / f"{thumbnail_name(label)}.png"


def resolve_destination(destination: Path, label: str) -> Path:
    """An existing directory receives ``<label>.zip``; anything else is the package path."""
    if destination.is_dir():
        return destination / f"{thumbnail_name(label)}{PACKAGE_EXTENSION}"
    return destination


def export_game(
    playlist_name: str,
    label: str,
    destination: Path,
    playlists_dir: Path,
    thumbnails_dir: Path,
    progress: ProgressFactory = TransferReporter,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Path:
    """
    Build a package holding the entry labelled ``label`` from ``playlist_name``.

    Missing thumbnails are skipped. Returns the written package path.
    """
    playlist = PlaylistStore(playlists_dir).load(playlist_name)
    item = playlist.find(label)
    if item is None:
        raise RecordNotFound(playlist_name, label)

    derived = playlist.restricted_to(label)
    if len(derived.items) > 1:
        logger.debug(f"{len(derived.items)} entries share the label '{label}', exporting all")
    playlist_bytes = derived.to_json().encode("utf-8")

    files: list[_FileEntry] = []
    rom_source = Path(item.path)
    try:
        rom_size = rom_source.stat().st_size
    except OSError as e:
        raise PackageWriteError(rom_source, e) from e
    files.append(_FileEntry(rom_source, rom_entry(playlist_name, rom_source.name), rom_size))

    for kind in ThumbnailKind:
        thumb = thumbnail_path(thumbnails_dir, playlist_name, kind, label)
        if thumb.is_file():
            files.append(_FileEntry(thumb, thumbnail_entry(playlist_name, kind, thumb.name), thumb.stat().st_size))
        else:
            logger.debug(f"No {kind} thumbnail for '{label}' ({thumb})")

    package_path = resolve_destination(destination, label)
    total = len(playlist_bytes) + sum(f.size for f in files)
    logger.info(f"Exporting '{label}' from {playlist_name} → {package_path} ({format_size(total)})")

    reporter = progress(total, "Exporting game...")
    try:
        _write_package(package_path, playlist_entry(playlist_name), playlist_bytes, files, reporter, chunk_size)
    finally:
        reporter.finish()

    logger.info(f"Created package {package_path.name} with {len(files) + 1} entries")
    return package_path


def _write_package(
    package_path: Path,
    playlist_arcname: str,
    playlist_bytes: bytes,
    files: list[_FileEntry],
    reporter: Reporter,
    chunk_size: int,
) -> None:
    """Write all entries into the ZIP, streaming file contents chunk by chunk."""
    try:
        package_path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(package_path, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.writestr(playlist_arcname, playlist_bytes)
            reporter.increment(len(playlist_bytes))

            for entry in files:
                with open(entry.source, "rb") as src, zf.open(entry.arcname, "w", force_zip64=True) as dst:
                    while chunk := src.read(chunk_size):
                        dst.write(chunk)
                        reporter.increment(len(chunk))
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        raise PackageWriteError(package_path, e) from e
