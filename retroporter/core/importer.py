"""Package reader and playlist reconciler — import a transferred game into RetroArch."""

from __future__ import annotations

import zipfile
import zlib
from dataclasses import dataclass, field, replace
from pathlib import Path, PurePosixPath, PureWindowsPath

from loguru import logger

from retroporter.core.progress import ProgressFactory, TransferReporter
from retroporter.data.playlist_store import PlaylistStore
from retroporter.errors import (
    ArchiveReadError,
    EmptyPackage,
    InvalidPackage,
    PackageWriteError,
)
from retroporter.models.package import (
    PLAYLISTS_PREFIX,
    ROMS_PREFIX,
    THUMBNAILS_PREFIX,
    PackageContents,
    RomAsset,
    ThumbnailAsset,
    ThumbnailKind,
)
from retroporter.models.playlist import PLAYLIST_EXTENSION, Playlist, PlaylistItem

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class ImportResult:
    """Result of an import operation."""

    playlist_name: str
    playlist_path: Path
    item: PlaylistItem
    created_playlist: bool = False
    replaced: int = 0
    written_files: list[Path] = field(default_factory=list)


def read_package(
    origin: Path,
    progress: ProgressFactory = TransferReporter,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> PackageContents:
    """
    Read a package in a single pass over its entries.

    Entry order is irrelevant: each entry lands in its bucket (playlist, rom,
    one of the thumbnail kinds) and nothing depends on the playlist name until
    the pass is over.
    """
    playlists: list[tuple[str, bytes]] = []
    rom: RomAsset | None = None
    thumbnails: dict[ThumbnailKind, ThumbnailAsset] = {}

    try:
        with zipfile.ZipFile(origin, "r") as zf:
            infos = [info for info in zf.infolist() if not info.is_dir()]
            reporter = progress(sum(info.file_size for info in infos), "Reading package...")
            try:
                for info in infos:
                    parts = PurePosixPath(info.filename).parts
                    bucket = _classify(parts)
                    if bucket is None:
                        logger.warning(f"Ignoring unexpected package entry: {info.filename}")
                        continue

                    buf = bytearray()
                    with zf.open(info) as src:
                        while chunk := src.read(chunk_size):
                            buf.extend(chunk)
                            reporter.increment(len(chunk))
                    data = bytes(buf)

                    if bucket == PLAYLISTS_PREFIX:
                        playlists.append((PurePosixPath(parts[1]).stem, data))
                    elif bucket == ROMS_PREFIX:
                        if rom is not None:
                            logger.warning(f"Extra rom entry ignored: {info.filename}")
                            continue
                        rom = RomAsset(basename=parts[2], data=data)
                    else:
                        kind = ThumbnailKind(bucket)
                        thumbnails[kind] = ThumbnailAsset(kind=kind, filename=parts[3], data=data)
            finally:
                reporter.finish()
    except (
        OSError,
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        EOFError,
        zlib.error,
        NotImplementedError,  # compression method zipfile cannot decode (e.g. Deflate64)
        RuntimeError,  # encrypted entry
    ) as e:
        raise ArchiveReadError(origin, e) from e

    if not playlists:
        raise InvalidPackage(origin, "no playlist entry")
    if len(playlists) > 1:
        raise InvalidPackage(origin, f"{len(playlists)} playlist entries, expected one")

    playlist_name, playlist_bytes = playlists[0]
    try:
        playlist = Playlist.from_json(playlist_bytes)
    except (ValueError, TypeError) as e:
        raise InvalidPackage(origin, f"unreadable playlist: {e}") from e
    if not playlist.items:
        raise EmptyPackage(origin)

    if rom is None:
        logger.warning(f"Package {origin.name} carries no rom file")

    return PackageContents(
        playlist_name=playlist_name,
        playlist=playlist,
        rom=rom,
        thumbnails=thumbnails,
    )


def _is_safe_segment(segment: str) -> bool:
    """True if ``segment`` names a plain file or directory on both POSIX and Windows."""
    if segment in ("", ".", "..") or "\\" in segment or ":" in segment:
        return False
    return PureWindowsPath(segment).name == segment


def _classify(parts: tuple[str, ...]) -> str | None:
    """Bucket for an entry path: a prefix name, a thumbnail kind, or None."""
    if not parts or not all(_is_safe_segment(p) for p in parts):
        return None
    prefix = parts[0]
    if prefix == PLAYLISTS_PREFIX and len(parts) == 2 and parts[1].endswith(PLAYLIST_EXTENSION):
        return PLAYLISTS_PREFIX
    if prefix == ROMS_PREFIX and len(parts) == 3:
        return ROMS_PREFIX
    if prefix == THUMBNAILS_PREFIX and len(parts) == 4:
        try:
            return ThumbnailKind(parts[2]).value
        except ValueError:
            return None
    return None


def rewrite_item_path(item: PlaylistItem, content_root: str, basename: str) -> PlaylistItem:
    """Copy of ``item`` pointing at ``<content_root>/<basename>``."""
    return replace(item, path=str(Path(content_root) / basename), extra=dict(item.extra))


def reconcile(
    existing: Playlist | None,
    incoming: Playlist,
    playlist_name: str,
    destination_root: Path,
    rom_basename: str | None = None,
) -> tuple[Playlist, PlaylistItem, int]:
    """
    Merge the incoming entry into ``existing`` (or a new playlist).

    Entries sharing the incoming label are replaced; all others keep their
    order. Returns ``(playlist, imported_item, replaced_count)``.
    """
    item = incoming.items[0]
    default_root = str(destination_root / playlist_name)

    if existing is None:
        target = incoming.emptied()
        target.scan_content_dir = default_root
        replaced = 0
    else:
        kept = existing.without(item.label)
        replaced = len(existing.items) - len(kept)
        target = existing.emptied()
        target.items = kept
        if not target.scan_content_dir:
            target.scan_content_dir = default_root

    basename = rom_basename or PurePosixPath(item.path.replace("\\", "/")).name
    imported = rewrite_item_path(item, target.scan_content_dir, basename)
    target.items.append(imported)
    return target, imported, replaced


def import_game(
    origin: Path,
    playlists_dir: Path,
    thumbnails_dir: Path,
    destination_root: Path,
    progress: ProgressFactory = TransferReporter,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> ImportResult:
    """
    Import a package: merge its entry into the local playlist and write its assets.

    ``destination_root`` only matters when the playlist does not exist yet.
    Assets are written before the playlist file, so a failed write leaves the
    playlist untouched.
    """
    contents = read_package(origin, progress=progress, chunk_size=chunk_size)
    name = contents.playlist_name
    store = PlaylistStore(playlists_dir)

    existing = store.load(name) if store.exists(name) else None
    playlist, item, replaced = reconcile(
        existing,
        contents.playlist,
        name,
        destination_root,
        rom_basename=contents.rom.basename if contents.rom else None,
    )

    written: list[Path] = []
    if contents.rom is not None:
        written.append(_write_asset(Path(item.path), contents.rom.data))
    for kind, thumb in contents.thumbnails.items():
        written.append(_write_asset(thumbnails_dir / name / kind / thumb.filename, thumb.data))

    playlist_path = store.save(name, playlist)

    if existing is None:
        logger.info(f"Created playlist {name} with content directory {playlist.scan_content_dir}")
    elif replaced:
        logger.info(f"Replaced {replaced} existing entr{'y' if replaced == 1 else 'ies'} for '{item.label}'")
    logger.info(f"Imported '{item.label}' into {name} ({len(written)} files written)")

    return ImportResult(
        playlist_name=name,
        playlist_path=playlist_path,
        item=item,
        created_playlist=existing is None,
        replaced=replaced,
        written_files=written,
    )


def _write_asset(dest: Path, data: bytes) -> Path:
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(data)
    except OSError as e:
        raise PackageWriteError(dest, e) from e
    logger.debug(f"Wrote {dest}")
    return dest
