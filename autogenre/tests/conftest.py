"""Shared test fixtures for autogenre tests."""

from unittest.mock import Mock

import pytest

from autogenre.models import (
    AppSettings, AudioFile, Confidence, EnhancedAudioFile, Metadata, MetadataResult
)


@pytest.fixture
def sample_metadata():
    """Identifiable metadata without a genre."""
    return Metadata(
        title="One More Time",
        artist="Daft Punk",
        album="Discovery",
        genre=None,
        year=2001,
        bpm=123,
    )


@pytest.fixture
def incomplete_metadata():
    """Metadata missing the artist, so it cannot be looked up."""
    return Metadata(title="Untitled", artist=None)


@pytest.fixture
def house_result():
    """A High confidence suggestion."""
    return MetadataResult(
        genre="House",
        artist="Daft Punk",
        confidence=Confidence.HIGH,
        source="X",
    )


@pytest.fixture
def sample_audio_file(sample_metadata):
    """An AudioFile as produced by a scan."""
    return AudioFile(
        path="/music/01 - one more time.mp3",
        filename="01 - one more time.mp3",
        extension="mp3",
        current_metadata=sample_metadata,
    )


@pytest.fixture
def annotated_file(sample_audio_file, house_result):
    """An EnhancedAudioFile carrying one suggestion."""
    af = EnhancedAudioFile.from_audio_file(sample_audio_file)
    af.suggested_metadata = [house_result]
    return af


@pytest.fixture
def default_settings():
    """AppSettings with every default."""
    return AppSettings()


@pytest.fixture
def make_provider():
    """Factory for provider doubles answering with a fixed result or error."""
    def _make(name, result=None, error=None, configured=True):
        provider = Mock()
        provider.name = name
        provider.is_configured = Mock(return_value=configured)
        if error is not None:
            provider.search_track = Mock(side_effect=error)
        else:
            provider.search_track = Mock(return_value=result)
        return provider
    return _make
