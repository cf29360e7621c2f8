"""Shared utility functions."""

from __future__ import annotations

# Characters RetroArch replaces with "_" when looking up thumbnail files.
THUMBNAIL_ILLEGAL_CHARS = '&*/:`<>?\\|'


def format_size(size_bytes: int) -> str:
    """Format byte count to human-readable string."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.2f} GB"


def thumbnail_name(label: str) -> str:
    """File stem RetroArch uses for a playlist entry's thumbnails."""
    for ch in THUMBNAIL_ILLEGAL_CHARS:
        label = label.replace(ch, "_")
    return label
