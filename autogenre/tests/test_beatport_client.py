"""Tests for beatport_client.py."""

from unittest.mock import Mock, patch

import pytest
import requests

from autogenre.beatport_client import BeatportClient, clear_token_cache
from autogenre.errors import ProviderError
from autogenre.models import Confidence


@pytest.fixture(autouse=True)
def fresh_token_cache():
    """Every test starts without cached tokens."""
    clear_token_cache()
    yield
    clear_token_cache()


@pytest.fixture
def client():
    return BeatportClient("dj", "secret")


def _response(json_data, ok=True, status_code=200):
    resp = Mock()
    resp.ok = ok
    resp.status_code = status_code
    resp.text = "error"
    resp.json = Mock(return_value=json_data)
    resp.raise_for_status = Mock()
    return resp


TRACK = {
    "results": [{
        "name": "One More Time",
        "artists": [{"name": "Daft Punk"}],
        "genre": {"name": "House"},
        "sub_genre": {"name": "French House"},
    }]
}


class TestParseSearch:
    """Tests for _parse_search."""

    def test_prefers_sub_genre(self, client):
        """Should suggest the sub-genre with High confidence."""
        result = client._parse_search(TRACK, "daft punk")
        assert result.genre == "French House"
        assert result.artist == "Daft Punk"
        assert result.confidence is Confidence.HIGH
        assert result.source == "Beatport"

    def test_genre_without_sub_genre(self, client):
        """Should fall back to the main genre."""
        data = {"results": [{"artists": [], "genre": {"name": "Techno"}, "sub_genre": None}]}
        result = client._parse_search(data, "Input Artist")
        assert result.genre == "Techno"
        assert result.artist == "Input Artist"

    def test_no_genre_is_low(self, client):
        """Should be Low confidence without any genre."""
        data = {"results": [{"artists": [{"name": "X"}]}]}
        result = client._parse_search(data, "X")
        assert result.genre is None
        assert result.confidence is Confidence.LOW

    def test_no_results(self, client):
        """Should report no match with Low confidence."""
        result = client._parse_search({"results": []}, "Artist")
        assert result.genre is None
        assert result.artist == "Artist"
        assert result.confidence is Confidence.LOW
        assert result.source == "Beatport (No match)"


class TestSearchTrack:
    """Tests for search_track and token handling."""

    def test_not_configured(self):
        """Should raise ProviderError without credentials."""
        with pytest.raises(ProviderError, match="Beatport"):
            BeatportClient(None, None).search_track("A", "T")

    def test_search_uses_bearer_token(self, client):
        """Should authenticate, then search with the token."""
        with patch.object(client.session, "post", return_value=_response(
                {"access_token": "tok", "expires_in": 3600})) as post, \
                patch.object(client.session, "get", return_value=_response(TRACK)) as get:
            result = client.search_track("Daft Punk", "One More Time")

        assert result.genre == "French House"
        assert post.call_args.kwargs["data"]["grant_type"] == "password"
        assert get.call_args.kwargs["headers"]["Authorization"] == "Bearer tok"
        assert get.call_args.kwargs["params"] == {"q": "Daft Punk One More Time", "per_page": 1}

    def test_token_is_cached(self, client):
        """Should reuse the token across searches and clients."""
        with patch("requests.Session.post", return_value=_response(
                {"access_token": "tok", "expires_in": 3600})) as post, \
                patch("requests.Session.get", return_value=_response(TRACK)):
            client.search_track("A", "T")
            client.search_track("A", "T2")
            BeatportClient("dj", "secret").search_track("A", "T3")

        assert post.call_count == 1

    def test_expired_token_refreshed(self, client):
        """Should request a new token once the cached one expires."""
        with patch("autogenre.beatport_client.time.time", side_effect=[1000.0, 1000.0 + 3400]), \
                patch.object(client.session, "post", return_value=_response(
                    {"access_token": "tok", "expires_in": 3600})) as post, \
                patch.object(client.session, "get", return_value=_response(TRACK)):
            client.search_track("A", "T")
            client.search_track("A", "T")

        assert post.call_count == 2

    def test_auth_failure(self, client):
        """Should raise ProviderError when login is rejected."""
        with patch.object(client.session, "post", return_value=_response({}, ok=False, status_code=401)):
            with pytest.raises(ProviderError, match="Auth failed"):
                client.search_track("A", "T")

    def test_request_failure(self, client):
        """Should wrap network errors."""
        with patch.object(client.session, "post", return_value=_response({"access_token": "tok"})), \
                patch.object(client.session, "get",
                             side_effect=requests.exceptions.ConnectionError("down")):
            with pytest.raises(ProviderError, match="Search failed"):
                client.search_track("A", "T")
