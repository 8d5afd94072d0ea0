"""Tests for spotify_client.py."""

from unittest.mock import Mock, patch

import pytest
from spotipy.exceptions import SpotifyException

from autogenre.errors import ProviderError
from autogenre.models import Confidence
from autogenre.spotify_client import SpotifyClient, _quote_if_multiword


@pytest.fixture
def client():
    return SpotifyClient("id", "secret")


@pytest.fixture
def sp():
    """A spotipy double with one matching track."""
    mock = Mock()
    mock.search = Mock(return_value={"tracks": {"items": [
        {"name": "One More Time", "artists": [{"id": "a1", "name": "Daft Punk"}]}
    ]}})
    mock.artist = Mock(return_value={"genres": ["filter house", "french house"]})
    return mock


class TestQuoteIfMultiword:
    """Tests for _quote_if_multiword."""

    def test_quotes_phrases(self):
        """Should quote values with spaces only."""
        assert _quote_if_multiword("Daft Punk") == '"Daft Punk"'
        assert _quote_if_multiword("Justice") == "Justice"


class TestSearchTrack:
    """Tests for search_track."""

    def test_match_with_genre(self, client, sp):
        """Should suggest the artist's first genre with High confidence."""
        with patch.object(client, "_client", return_value=sp):
            result = client.search_track("Daft Punk", "One More Time")

        sp.search.assert_called_once_with(
            q='artist:"Daft Punk" track:"One More Time"', type="track", limit=1
        )
        sp.artist.assert_called_once_with("a1")
        assert result.genre == "filter house"
        assert result.artist == "Daft Punk"
        assert result.confidence is Confidence.HIGH
        assert result.source == "Spotify"

    def test_match_without_genre(self, client, sp):
        """Should be Medium confidence when the artist has no genres."""
        sp.artist.return_value = {"genres": []}
        with patch.object(client, "_client", return_value=sp):
            result = client.search_track("Daft Punk", "One More Time")
        assert result.genre is None
        assert result.confidence is Confidence.MEDIUM

    def test_artist_lookup_fails(self, client, sp):
        """Should keep the match at Medium when the artist lookup fails."""
        sp.artist.side_effect = SpotifyException(404, -1, "not found")
        with patch.object(client, "_client", return_value=sp):
            result = client.search_track("Daft Punk", "One More Time")
        assert result.genre is None
        assert result.artist == "Daft Punk"
        assert result.confidence is Confidence.MEDIUM

    def test_no_match(self, client, sp):
        """Should report no match with Low confidence."""
        sp.search.return_value = {"tracks": {"items": []}}
        with patch.object(client, "_client", return_value=sp):
            result = client.search_track("Nobody", "Nothing")
        assert result.source == "Spotify (No match)"
        assert result.artist == "Nobody"
        assert result.confidence is Confidence.LOW

    def test_search_error(self, client, sp):
        """Should wrap spotipy errors in ProviderError."""
        sp.search.side_effect = SpotifyException(401, -1, "invalid token")
        with patch.object(client, "_client", return_value=sp):
            with pytest.raises(ProviderError, match="Spotify: Search failed"):
                client.search_track("A", "T")

    def test_not_configured(self):
        """Should raise ProviderError without credentials."""
        client = SpotifyClient(None, "secret")
        assert not client.is_configured()
        with pytest.raises(ProviderError):
            client.search_track("A", "T")
