"""Tag reading, writing and backup using mutagen for cross-format support."""

import json
import logging
import time
from pathlib import Path
from typing import Optional

from mutagen import MutagenError
from mutagen.aiff import AIFF
from mutagen.flac import FLAC
from mutagen.id3 import TALB, TBPM, TCON, TDRC, TIT2, TPE1
from mutagen.mp3 import MP3
from mutagen.mp4 import MP4
from mutagen.oggvorbis import OggVorbis
from mutagen.wave import WAVE

from autogenre.errors import TagWriteError
from autogenre.models import Metadata

logger = logging.getLogger(__name__)

BACKUP_DIR_NAME = ".autogenre_backups"


class TagHandler:
    """Handles reading and writing tags using mutagen."""

    SUPPORTED_EXTENSIONS = {".mp3", ".flac", ".wav", ".m4a", ".aiff", ".ogg"}

    # ID3-tagged containers
    ID3_FORMATS = {".mp3": MP3, ".wav": WAVE, ".aiff": AIFF}
    # Vorbis-comment containers
    VORBIS_FORMATS = {".flac": FLAC, ".ogg": OggVorbis}

    # MP4/M4A tag mapping (different from ID3)
    MP4_TAGS = {
        "title": "\xa9nam",
        "artist": "\xa9ART",
        "album": "\xa9alb",
        "year": "\xa9day",
        "genre": "\xa9gen",
        "bpm": "tmpo",  # list of ints
    }

    @classmethod
    def is_supported(cls, file_path: str) -> bool:
        """Check if file format is supported."""
        return Path(file_path).suffix.lower() in cls.SUPPORTED_EXTENSIONS

    def read_tags(self, file_path: str) -> Metadata:
        """
        Read existing tags from audio file.

        Args:
            file_path: Path to audio file

        Returns:
            Metadata with current tags (empty for unknown formats)

        Raises:
            MutagenError, OSError: If the file cannot be parsed
        """
        ext = Path(file_path).suffix.lower()

        if ext in self.ID3_FORMATS:
            return self._read_id3_tags(file_path, self.ID3_FORMATS[ext])
        elif ext in self.VORBIS_FORMATS:
            return self._read_vorbis_tags(file_path, self.VORBIS_FORMATS[ext])
        elif ext == ".m4a":
            return self._read_m4a_tags(file_path)
        else:
            logger.debug(f"Unsupported format: {ext}")
            return Metadata()

    def _read_id3_tags(self, file_path: str, file_type) -> Metadata:
        """Read ID3v2 frames from MP3, WAV or AIFF."""
        audio = file_type(file_path)
        tags = audio.tags or {}

        return Metadata(
            title=self._get_tag_str(tags, "TIT2"),
            artist=self._get_tag_str(tags, "TPE1"),
            album=self._get_tag_str(tags, "TALB"),
            genre=self._get_tag_str(tags, "TCON"),
            year=self._parse_year(self._get_tag_str(tags, "TDRC")),
            bpm=self._parse_bpm(self._get_tag_str(tags, "TBPM")),
        )

    def _read_vorbis_tags(self, file_path: str, file_type) -> Metadata:
        """Read Vorbis comments from FLAC or OGG."""
        audio = file_type(file_path)

        return Metadata(
            title=audio.get("title", [None])[0] or None,
            artist=audio.get("artist", [None])[0] or None,
            album=audio.get("album", [None])[0] or None,
            genre=audio.get("genre", [None])[0] or None,
            year=self._parse_year(audio.get("date", [""])[0]),
            bpm=self._parse_bpm(audio.get("bpm", [""])[0]),
        )

    def _read_m4a_tags(self, file_path: str) -> Metadata:
        """Read MP4 tags from M4A file."""
        audio = MP4(file_path)
        tags = audio.tags or {}

        tempo = tags.get(self.MP4_TAGS["bpm"])
        bpm = int(tempo[0]) if tempo else None

        return Metadata(
            title=self._get_mp4_tag(tags, "title"),
            artist=self._get_mp4_tag(tags, "artist"),
            album=self._get_mp4_tag(tags, "album"),
            genre=self._get_mp4_tag(tags, "genre"),
            year=self._parse_year(self._get_mp4_tag(tags, "year") or ""),
            bpm=bpm or None,
        )

    def write_tags(self, file_path: str, metadata: Metadata) -> None:
        """
        Write tags to audio file. Fields that are None are left untouched.

        Args:
            file_path: Path to audio file
            metadata: Metadata to write

        Raises:
            TagWriteError: If the format is unsupported or writing fails
        """
        ext = Path(file_path).suffix.lower()

        try:
            if ext in self.ID3_FORMATS:
                self._write_id3_tags(file_path, metadata, self.ID3_FORMATS[ext])
            elif ext in self.VORBIS_FORMATS:
                self._write_vorbis_tags(file_path, metadata, self.VORBIS_FORMATS[ext])
            elif ext == ".m4a":
                self._write_m4a_tags(file_path, metadata)
            else:
                raise TagWriteError(f"Unsupported file format for writing: {ext or '(none)'}")
        except (MutagenError, OSError) as e:
            raise TagWriteError(f"Failed to write tags: {e}") from e

    def _write_id3_tags(self, file_path: str, metadata: Metadata, file_type) -> None:
        """Write ID3v2.4 frames to MP3, WAV or AIFF."""
        audio = file_type(file_path)
        if audio.tags is None:
            audio.add_tags()

        if metadata.title:
            audio.tags.add(TIT2(encoding=3, text=metadata.title))
        if metadata.artist:
            audio.tags.add(TPE1(encoding=3, text=metadata.artist))
        if metadata.album:
            audio.tags.add(TALB(encoding=3, text=metadata.album))
        if metadata.genre:
            audio.tags.add(TCON(encoding=3, text=metadata.genre))
        if metadata.year:
            audio.tags.add(TDRC(encoding=3, text=str(metadata.year)))
        if metadata.bpm:
            audio.tags.add(TBPM(encoding=3, text=str(metadata.bpm)))

        audio.save()

    def _write_vorbis_tags(self, file_path: str, metadata: Metadata, file_type) -> None:
        """Write Vorbis comments to FLAC or OGG."""
        audio = file_type(file_path)
        if audio.tags is None:
            audio.add_tags()

        if metadata.title:
            audio["title"] = metadata.title
        if metadata.artist:
            audio["artist"] = metadata.artist
        if metadata.album:
            audio["album"] = metadata.album
        if metadata.genre:
            audio["genre"] = metadata.genre
        if metadata.year:
            audio["date"] = str(metadata.year)
        if metadata.bpm:
            audio["bpm"] = str(metadata.bpm)

        audio.save()

    def _write_m4a_tags(self, file_path: str, metadata: Metadata) -> None:
        """Write MP4 tags to M4A file."""
        audio = MP4(file_path)
        if audio.tags is None:
            audio.add_tags()

        if metadata.title:
            audio.tags[self.MP4_TAGS["title"]] = [metadata.title]
        if metadata.artist:
            audio.tags[self.MP4_TAGS["artist"]] = [metadata.artist]
        if metadata.album:
            audio.tags[self.MP4_TAGS["album"]] = [metadata.album]
        if metadata.genre:
            audio.tags[self.MP4_TAGS["genre"]] = [metadata.genre]
        if metadata.year:
            audio.tags[self.MP4_TAGS["year"]] = [str(metadata.year)]
        if metadata.bpm:
            audio.tags[self.MP4_TAGS["bpm"]] = [int(metadata.bpm)]

        audio.save()

    def backup_metadata(self, file_path: str, metadata: Metadata) -> Path:
        """
        Save a JSON snapshot of tags next to the file.

        The snapshot goes to .autogenre_backups/<filename>.<unix-time>.json
        in the file's folder. A snapshot taken in the same second gets a
        -1, -2, ... suffix; existing snapshots are never overwritten.

        Returns:
            Path of the snapshot.
        """
        path = Path(file_path)
        backup_dir = path.parent / BACKUP_DIR_NAME
        stem = f"{path.name}.{int(time.time())}"
        content = json.dumps(metadata.to_dict(), indent=2)

        try:
            backup_dir.mkdir(parents=True, exist_ok=True)
            counter = 0
            while True:
                suffix = f"-{counter}" if counter else ""
                backup_path = backup_dir / f"{stem}{suffix}.json"
                try:
                    with open(backup_path, "x", encoding="utf-8") as f:
                        f.write(content)
                    break
                except FileExistsError:
                    counter += 1
        except OSError as e:
            raise TagWriteError(f"Failed to write backup file: {e}") from e

        logger.debug(f"Backed up tags of {path.name} to {backup_path}")
        return backup_path

    def update_metadata(self, file_path: str, metadata: Metadata,
                        backup: bool = True) -> Optional[Path]:
        """
        Write tags, optionally snapshotting the current ones first.

        Nothing is written when the snapshot fails.

        Args:
            file_path: Path to audio file
            metadata: Metadata to write
            backup: Snapshot current tags before writing

        Returns:
            Path of the snapshot, or None without backup.

        Raises:
            TagWriteError: If the snapshot or the write fails
        """
        backup_path = None
        if backup:
            try:
                current = self.read_tags(file_path)
            except (MutagenError, OSError) as e:
                raise TagWriteError(f"Cannot read current metadata for backup: {e}") from e
            backup_path = self.backup_metadata(file_path, current)

        self.write_tags(file_path, metadata)
        return backup_path

    def restore_from_backup(self, backup_path: str, original_path: str) -> Metadata:
        """
        Write a snapshot made by backup_metadata() back to a file.

        Returns:
            The restored Metadata.
        """
        try:
            data = json.loads(Path(backup_path).read_text(encoding="utf-8"))
        except OSError as e:
            raise TagWriteError(f"Failed to read backup file: {e}") from e
        except json.JSONDecodeError as e:
            raise TagWriteError(f"Failed to parse backup data: {e}") from e

        metadata = Metadata.from_dict(data)
        self.write_tags(original_path, metadata)
        return metadata

    def _get_tag_str(self, tags: dict, key: str) -> Optional[str]:
        """Get string value from ID3 tag."""
        tag = tags.get(key)
        if tag:
            value = str(tag[0]) if hasattr(tag, "__getitem__") else str(tag)
            return value if value else None
        return None

    def _get_mp4_tag(self, tags: dict, key: str) -> Optional[str]:
        """Get string value from MP4 tag."""
        mp4_key = self.MP4_TAGS.get(key)
        if mp4_key and mp4_key in tags:
            value = tags[mp4_key]
            if isinstance(value, list) and value:
                return str(value[0]) if value[0] else None
            return str(value) if value else None
        return None

    def _parse_year(self, value: Optional[str]) -> Optional[int]:
        """Parse year from various date formats."""
        if not value:
            return None
        try:
            # Handle formats like "2020", "2020-01-15", etc.
            return int(str(value)[:4])
        except (ValueError, IndexError):
            return None

    def _parse_bpm(self, value: Optional[str]) -> Optional[int]:
        """Parse BPM like '128' or '127.9' into a rounded int."""
        if not value:
            return None
        try:
            return int(round(float(str(value).strip())))
        except ValueError:
            return None
