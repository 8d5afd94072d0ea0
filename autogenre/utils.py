"""Utility functions for AutoGenre."""

import re
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from autogenre.models import Metadata

# Substituted for any pattern field that is missing or blank
UNKNOWN_PLACEHOLDER = "Unknown"

PATTERN_FIELDS = ("genre", "artist", "title", "album", "year")


def sanitize_filename(s: str) -> str:
    """Sanitize a string for use in filenames."""
    s = re.sub(r'[<>:"/\\|?*]', '_', s)
    s = s.strip('. ')
    s = re.sub(r'\s+', ' ', s)
    s = re.sub(r'_+', '_', s)
    return s


def _field_value(metadata: "Metadata", name: str) -> Optional[str]:
    value = getattr(metadata, name, None)
    if value is None:
        return None
    cleaned = sanitize_filename(str(value))
    return cleaned or None


def expand_folder_pattern(pattern: str, metadata: "Metadata") -> str:
    """
    Fill {genre}, {artist}, {title}, {album} and {year} from metadata.

    Values are sanitized so they cannot introduce extra path levels; a
    missing or blank value becomes "Unknown". Other braces are left as-is.

    Args:
        pattern: Folder pattern, "/" separates nested folders
        metadata: Metadata to take values from

    Returns:
        Relative folder path with empty segments removed.
    """
    expanded = pattern
    for name in PATTERN_FIELDS:
        value = _field_value(metadata, name) or UNKNOWN_PLACEHOLDER
        expanded = expanded.replace("{" + name + "}", value)

    segments = [seg.strip() for seg in re.split(r"[/\\]", expanded)]
    return "/".join(seg for seg in segments if seg)


def generate_track_filename(metadata: "Metadata", extension: str) -> str:
    """
    Generate "Artist - Title.ext" from metadata.

    Args:
        metadata: Metadata with artist and title
        extension: File extension with or without leading dot

    Returns:
        Filename with "Unknown Artist" / "Unknown Title" for missing fields.
    """
    artist = _field_value(metadata, "artist") or "Unknown Artist"
    title = _field_value(metadata, "title") or "Unknown Title"
    extension = extension.lstrip(".")
    return f"{artist} - {title}.{extension}"
