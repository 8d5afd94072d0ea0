"""Tests for scanner.py folder scanning and duplicate detection."""

from unittest.mock import Mock

import pytest
from mutagen import MutagenError

from autogenre.errors import ScanError
from autogenre.models import AudioFile, Metadata
from autogenre.scanner import find_duplicates, scan_folder


@pytest.fixture
def library(tmp_path):
    """A folder tree with audio, non-audio and backup files."""
    (tmp_path / "b.mp3").write_bytes(b"")
    (tmp_path / "cover.jpg").write_bytes(b"")
    sub = tmp_path / "Sub"
    sub.mkdir()
    (sub / "a.FLAC").write_bytes(b"")
    (sub / "c.m4a").write_bytes(b"")
    backups = tmp_path / ".autogenre_backups"
    backups.mkdir()
    (backups / "b.mp3").write_bytes(b"")
    return tmp_path


@pytest.fixture
def tag_handler():
    handler = Mock()
    handler.read_tags = Mock(return_value=Metadata(artist="A", title="T"))
    return handler


class TestScanFolder:
    """Tests for scan_folder."""

    def test_finds_supported_files_recursively(self, library, tag_handler):
        """Should list audio files in subfolders, sorted by path."""
        files = scan_folder(str(library), tag_handler)

        assert [af.path for af in files] == sorted([
            str(library / "Sub" / "a.FLAC"),
            str(library / "Sub" / "c.m4a"),
            str(library / "b.mp3"),
        ])
        assert {af.extension for af in files} == {"flac", "m4a", "mp3"}
        assert all(af.current_metadata == Metadata(artist="A", title="T") for af in files)

    def test_skips_backup_folder(self, library, tag_handler):
        """Should not list files inside .autogenre_backups."""
        files = scan_folder(str(library), tag_handler)
        assert not any(".autogenre_backups" in af.path for af in files)

    def test_unreadable_tags_listed_without_metadata(self, library, tag_handler, caplog):
        """Should keep files whose tags cannot be read."""
        tag_handler.read_tags.side_effect = MutagenError("bad header")
        files = scan_folder(str(library), tag_handler)

        assert len(files) == 3
        assert all(af.current_metadata is None for af in files)
        assert "Could not read tags" in caplog.text

    def test_missing_path(self, tmp_path):
        """Should raise ScanError for a missing folder."""
        with pytest.raises(ScanError, match="does not exist"):
            scan_folder(str(tmp_path / "nope"))

    def test_not_a_folder(self, tmp_path):
        """Should raise ScanError for a file path."""
        path = tmp_path / "a.mp3"
        path.write_bytes(b"")
        with pytest.raises(ScanError, match="not a folder"):
            scan_folder(str(path))

    def test_empty_folder(self, tmp_path, tag_handler):
        """Should return an empty inventory."""
        assert scan_folder(str(tmp_path), tag_handler) == []


def _file(name, artist, title):
    return AudioFile.from_path(f"/music/{name}", Metadata(artist=artist, title=title))


class TestFindDuplicates:
    """Tests for find_duplicates."""

    def test_groups_same_artist_and_title(self):
        """Should group files ignoring case and surrounding spaces."""
        files = [
            _file("1.mp3", "Daft Punk", "One More Time"),
            _file("2.mp3", "Justice", "D.A.N.C.E."),
            _file("3.flac", " daft punk", "one more time "),
            _file("4.mp3", "Justice", "D.A.N.C.E."),
        ]
        assert find_duplicates(files) == [[0, 2], [1, 3]]

    def test_no_duplicates(self):
        """Should return no groups for distinct tracks."""
        files = [_file("1.mp3", "A", "T1"), _file("2.mp3", "A", "T2")]
        assert find_duplicates(files) == []

    def test_ignores_incomplete_metadata(self):
        """Should not group files missing artist, title or tags."""
        files = [
            _file("1.mp3", None, "T"),
            _file("2.mp3", None, "T"),
            AudioFile.from_path("/music/3.mp3"),
            AudioFile.from_path("/music/4.mp3"),
        ]
        assert find_duplicates(files) == []
