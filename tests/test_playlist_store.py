"""Tests for PlaylistStore .lpl persistence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from retroporter.data.playlist_store import PlaylistStore
from retroporter.errors import InvalidPlaylist, PackageWriteError, PlaylistNotFound
from tests.factories import make_item, make_playlist


@pytest.fixture
def store(tmp_path: Path) -> PlaylistStore:
    return PlaylistStore(tmp_path / "playlists")


class TestPlaylistStore:
    def test_save_and_load(self, store: PlaylistStore, tmp_path: Path) -> None:
        playlist = make_playlist([make_item("Zelda", "/roms/zelda.sfc")])
        path = store.save("SNES", playlist)
        assert path == tmp_path / "playlists" / "SNES.lpl"
        assert store.exists("SNES")
        assert store.load("SNES") == playlist

    def test_file_is_indented_json(self, store: PlaylistStore) -> None:
        store.save("SNES", make_playlist([]))
        text = store.path_for("SNES").read_text(encoding="utf-8")
        assert text.startswith('{\n  "version": "1.5"')
        assert not store.path_for("SNES").with_suffix(".tmp").exists()

    def test_missing_playlist(self, store: PlaylistStore) -> None:
        assert not store.exists("GBA")
        with pytest.raises(PlaylistNotFound, match="GBA"):
            store.load("GBA")

    def test_corrupt_playlist(self, store: PlaylistStore, tmp_path: Path) -> None:
        (tmp_path / "playlists").mkdir(parents=True)
        store.path_for("Broken").write_text("{ not json", encoding="utf-8")
        with pytest.raises(InvalidPlaylist):
            store.load("Broken")

    def test_overwrite_replaces_items(self, store: PlaylistStore) -> None:
        store.save("SNES", make_playlist([make_item("A", "/a")]))
        store.save("SNES", make_playlist([make_item("B", "/b")]))
        data = json.loads(store.path_for("SNES").read_text(encoding="utf-8"))
        assert [i["label"] for i in data["items"]] == ["B"]

    def test_unwritable_directory(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x")
        with pytest.raises(PackageWriteError):
            PlaylistStore(blocker).save("SNES", make_playlist([]))
