"""Shared fixtures — a throwaway RetroArch installation under tmp_path."""

from __future__ import annotations

from pathlib import Path

import pytest

from retroporter.core.path_resolver import RetroArchConfig
from retroporter.data.playlist_store import PlaylistStore
from tests.factories import CFG_TEMPLATE, make_item, make_playlist


@pytest.fixture
def retroarch_dir(tmp_path: Path) -> Path:
    """RetroArch install dir with a retroarch.cfg using install-relative paths."""
    install = tmp_path / "RetroArch"
    install.mkdir()
    (install / "retroarch.cfg").write_text(CFG_TEMPLATE, encoding="utf-8")
    return install


@pytest.fixture
def retroarch_cfg(retroarch_dir: Path) -> RetroArchConfig:
    return RetroArchConfig.load(retroarch_dir)


@pytest.fixture
def playlists_dir(retroarch_dir: Path) -> Path:
    return retroarch_dir / "playlists"


@pytest.fixture
def thumbnails_dir(retroarch_dir: Path) -> Path:
    return retroarch_dir / "thumbnails"


@pytest.fixture
def source_library(tmp_path: Path, playlists_dir: Path, thumbnails_dir: Path) -> dict[str, Path]:
    """
    An "exporting machine": SNES playlist with three games, a rom file for
    each, and box art + snapshot (no title screen) for Super Metroid.
    """
    roms = tmp_path / "source_roms"
    roms.mkdir()
    paths = {}
    for label, filename in [
        ("Chrono Trigger", "chrono.sfc"),
        ("Super Metroid", "metroid.zip"),
        ("F-Zero", "fzero.sfc"),
    ]:
        rom = roms / filename
        rom.write_bytes(f"ROM:{label}".encode() * 1000)
        paths[label] = rom

    playlist = make_playlist(
        [make_item(label, str(path)) for label, path in paths.items()],
        content_dir=str(roms),
    )
    PlaylistStore(playlists_dir).save("SNES", playlist)

    for kind in ("Named_Boxarts", "Named_Snaps"):
        thumb_dir = thumbnails_dir / "SNES" / kind
        thumb_dir.mkdir(parents=True)
        (thumb_dir / "Super Metroid.png").write_bytes(f"PNG:{kind}".encode())

    return paths
