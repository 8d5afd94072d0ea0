"""Folder scanning: build the inventory of audio files and their tags."""

import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

from mutagen import MutagenError

from autogenre.errors import ScanError
from autogenre.models import AudioFile, Metadata
from autogenre.tag_handler import BACKUP_DIR_NAME, TagHandler

logger = logging.getLogger(__name__)


def scan_folder(path: str, tag_handler: Optional[TagHandler] = None) -> List[AudioFile]:
    """
    Recursively find supported audio files and read their tags.

    Symlinks are followed. A file whose tags cannot be read is still listed,
    with current_metadata set to None.

    Args:
        path: Folder to scan
        tag_handler: Tag reader (a default TagHandler if omitted)

    Returns:
        AudioFile records sorted by path.

    Raises:
        ScanError: If path does not exist or is not a folder
    """
    base = Path(path)
    if not base.exists():
        raise ScanError(f"Path does not exist: {path}")
    if not base.is_dir():
        raise ScanError(f"Path is not a folder: {path}")
    if not os.access(base, os.R_OK | os.X_OK):
        raise ScanError(f"Permission denied: {path}")

    tag_handler = tag_handler or TagHandler()

    found = []
    for root, dirs, files in os.walk(base, followlinks=True):
        dirs[:] = [d for d in dirs if d != BACKUP_DIR_NAME]
        for name in files:
            file_path = os.path.join(root, name)
            if TagHandler.is_supported(file_path) and os.path.isfile(file_path):
                found.append(file_path)

    audio_files = []
    for file_path in sorted(found):
        audio_files.append(AudioFile.from_path(file_path, _read_or_none(tag_handler, file_path)))

    logger.info(f"Found {len(audio_files)} audio files in {base}")
    return audio_files


def _read_or_none(tag_handler: TagHandler, file_path: str) -> Optional[Metadata]:
    try:
        return tag_handler.read_tags(file_path)
    except (MutagenError, OSError, ValueError) as e:
        logger.warning(f"Could not read tags from {Path(file_path).name}: {e}")
        return None


def _normalize(value: Optional[str]) -> str:
    return value.strip().lower() if value else ""


def _is_duplicate(a: Metadata, b: Metadata) -> bool:
    """Same artist and title, ignoring case and surrounding spaces."""
    artist_a, title_a = _normalize(a.artist), _normalize(a.title)
    if not artist_a or not title_a:
        return False
    return artist_a == _normalize(b.artist) and title_a == _normalize(b.title)


def find_duplicates(files: Sequence[AudioFile]) -> List[List[int]]:
    """
    Group inventory indices of files that look like the same track.

    Args:
        files: Inventory

    Returns:
        Groups of two or more indices, each in inventory order.
    """
    groups = []
    visited = [False] * len(files)

    for i, file_i in enumerate(files):
        if visited[i] or file_i.current_metadata is None:
            continue

        group = [i]
        for j in range(i + 1, len(files)):
            meta_j = files[j].current_metadata
            if visited[j] or meta_j is None:
                continue
            if _is_duplicate(file_i.current_metadata, meta_j):
                group.append(j)
                visited[j] = True

        if len(group) > 1:
            groups.append(group)

    return groups
