"""Tests for the RetroArch path resolver."""

from __future__ import annotations

from pathlib import Path

import pytest

from retroporter.core import path_resolver
from retroporter.core.path_resolver import (
    RetroArchConfig,
    locate_retroarch,
    parse_retroarch_cfg,
    resolve_value,
)
from retroporter.errors import ConfigurationError


class TestParseConfig:
    def test_quoted_values_comments_and_blanks(self) -> None:
        text = '# comment\n\nvideo_fullscreen = "true"\nsavefile_directory = ":\\saves"\nempty = ""\n'
        assert parse_retroarch_cfg(text) == {
            "video_fullscreen": "true",
            "savefile_directory": ":\\saves",
            "empty": "",
        }

    def test_unquoted_value(self) -> None:
        assert parse_retroarch_cfg("audio_volume = 0.0") == {"audio_volume": "0.0"}


class TestResolve:
    def test_marker_with_backslash(self, tmp_path: Path) -> None:
        assert resolve_value(":\\playlists", tmp_path) == tmp_path / "playlists"

    def test_marker_with_forward_slash_and_nesting(self, tmp_path: Path) -> None:
        assert resolve_value(":/a\\b/c", tmp_path) == tmp_path / "a" / "b" / "c"

    def test_absolute_value_verbatim(self, tmp_path: Path) -> None:
        assert resolve_value("/srv/retro/playlists", tmp_path) == Path("/srv/retro/playlists")

    def test_resolve_from_loaded_config(self, retroarch_cfg: RetroArchConfig, retroarch_dir: Path) -> None:
        assert retroarch_cfg.resolve("playlist_directory") == retroarch_dir / "playlists"
        assert retroarch_cfg.resolve("thumbnails_directory") == retroarch_dir / "thumbnails"

    @pytest.mark.parametrize("value", ["", "default"])
    def test_unset_key(self, tmp_path: Path, value: str) -> None:
        cfg = RetroArchConfig(tmp_path, {"playlist_directory": value})
        with pytest.raises(ConfigurationError, match="playlist_directory"):
            cfg.resolve("playlist_directory")

    def test_missing_key(self, retroarch_cfg: RetroArchConfig) -> None:
        with pytest.raises(ConfigurationError):
            retroarch_cfg.resolve("system_directory")

    def test_unreadable_config(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            RetroArchConfig.load(tmp_path / "nowhere")


class TestLocate:
    def test_override_wins(self, retroarch_dir: Path) -> None:
        assert locate_retroarch(retroarch_dir, configured="/ignored") == retroarch_dir

    def test_configured_path(self, retroarch_dir: Path) -> None:
        assert locate_retroarch(None, configured=str(retroarch_dir)) == retroarch_dir

    def test_override_without_cfg(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="retroarch.cfg"):
            locate_retroarch(tmp_path)

    def test_detects_steam_library(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        steam = tmp_path / "Steam"
        library = tmp_path / "SecondLibrary"
        (steam / "steamapps").mkdir(parents=True)
        (steam / "steamapps" / "libraryfolders.vdf").write_text(
            f'"libraryfolders"\n{{\n  "0"\n  {{\n    "path"  "{steam}"\n  }}\n'
            f'  "1"\n  {{\n    "path"  "{library}"\n  }}\n}}\n',
            encoding="utf-8",
        )
        install = library / "steamapps" / "common" / "RetroArch"
        install.mkdir(parents=True)
        (install / "retroarch.cfg").write_text("", encoding="utf-8")

        monkeypatch.setattr(path_resolver, "_steam_roots", lambda: [steam])
        monkeypatch.setattr(path_resolver, "_standalone_candidates", lambda: [])
        assert locate_retroarch() == install

    def test_nothing_found(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(path_resolver, "_steam_roots", lambda: [tmp_path / "NoSteam"])
        monkeypatch.setattr(path_resolver, "_standalone_candidates", lambda: [tmp_path / "nope"])
        with pytest.raises(ConfigurationError, match="not found"):
            locate_retroarch()
