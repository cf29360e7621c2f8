"""RetroArch playlist (.lpl) models."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from typing import Any

PLAYLIST_EXTENSION = ".lpl"


_BOOKKEEPING = ("extra", "key_order")


def _split_known(
    cls: type, data: dict[str, Any], nested: tuple[str, ...] = ()
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split a raw JSON object into scalar dataclass fields and pass-through extras."""
    names = {f.name for f in fields(cls)} - {*_BOOKKEEPING, *nested}
    known = {k: v for k, v in data.items() if k in names}
    extra = {k: v for k, v in data.items() if k not in names and k not in nested}
    return known, extra


def _in_key_order(d: dict[str, Any], key_order: list[str]) -> dict[str, Any]:
    """Reorder ``d`` to follow the key order it was read with; keys not seen then go last."""
    ordered = {k: d[k] for k in key_order if k in d}
    ordered.update(d)
    return ordered


@dataclass
class PlaylistItem:
    """One game entry. Everything but path and label is opaque pass-through."""

    path: str = ""
    label: str = ""
    core_path: str = ""
    core_name: str = ""
    crc32: str = ""
    db_name: str = ""
    extra: dict[str, Any] = field(default_factory=dict)
    key_order: list[str] = field(default_factory=list, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlaylistItem:
        known, extra = _split_known(cls, data)
        return cls(**known, extra=extra, key_order=list(data))

    def to_dict(self) -> dict[str, Any]:
        d = {f.name: getattr(self, f.name) for f in fields(self) if f.name not in _BOOKKEEPING}
        d.update(self.extra)
        return _in_key_order(d, self.key_order)


@dataclass
class Playlist:
    """
    RetroArch playlist — playlist-wide settings plus an ordered item list.

    Field order matches the JSON RetroArch writes. Unknown keys (such as
    ``base_content_directory``) are kept in ``extra``, and a parsed playlist is
    written back in the key order it was read with.
    """

    version: str = "1.5"
    default_core_path: str = ""
    default_core_name: str = ""
    label_display_mode: int = 0
    right_thumbnail_mode: int = 0
    left_thumbnail_mode: int = 0
    thumbnail_match_mode: int = 0
    sort_mode: int = 0
    scan_content_dir: str = ""
    scan_file_exts: str = ""
    scan_dat_file_path: str = ""
    scan_search_recursively: bool = False
    scan_search_archives: bool = False
    scan_filter_dat_content: bool = False
    scan_overwrite_playlist: bool = False
    items: list[PlaylistItem] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)
    key_order: list[str] = field(default_factory=list, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Playlist:
        known, extra = _split_known(cls, data, nested=("items",))
        raw_items = data.get("items", [])
        if not isinstance(raw_items, list):
            raise ValueError("'items' is not a list")
        if not all(isinstance(item, dict) for item in raw_items):
            raise ValueError("playlist item is not an object")
        items = [PlaylistItem.from_dict(item) for item in raw_items]
        return cls(**known, items=items, extra=extra, key_order=list(data))

    @classmethod
    def from_json(cls, text: str | bytes) -> Playlist:
        """Parse playlist JSON. Raises ValueError on malformed content."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("playlist root is not an object")
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        d = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in ("items", *_BOOKKEEPING)
        }
        d["items"] = [item.to_dict() for item in self.items]
        d.update(self.extra)
        return _in_key_order(d, self.key_order)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    # ── Label-keyed access ──

    def find(self, label: str) -> PlaylistItem | None:
        """First item whose label equals ``label`` exactly."""
        for item in self.items:
            if item.label == label:
                return item
        return None

    def matching(self, label: str) -> list[PlaylistItem]:
        return [item for item in self.items if item.label == label]

    def without(self, label: str) -> list[PlaylistItem]:
        return [item for item in self.items if item.label != label]

    def restricted_to(self, label: str) -> Playlist:
        """Copy with the same settings whose items are all entries labelled ``label``."""
        return replace(self, items=self.matching(label), extra=dict(self.extra))

    def emptied(self) -> Playlist:
        """Copy with the same settings and no items."""
        return replace(self, items=[], extra=dict(self.extra))
