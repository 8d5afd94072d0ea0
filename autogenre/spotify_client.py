"""Spotify client for streaming-catalog artist genre lookups."""

from typing import Optional

import requests
import spotipy
from spotipy.oauth2 import SpotifyClientCredentials

from autogenre.errors import ProviderError
from autogenre.models import Confidence, MetadataResult


def _quote_if_multiword(value: str) -> str:
    """Quote search terms with spaces so Spotify matches them as a phrase."""
    if " " in value:
        return f'"{value}"'
    return value


class SpotifyClient:
    """Looks up a track on Spotify and suggests the artist's first genre."""

    name = "Spotify"

    def __init__(self, client_id: Optional[str], client_secret: Optional[str],
                 timeout: int = 15):
        """
        Initialize Spotify client.

        Args:
            client_id: Spotify app client ID
            client_secret: Spotify app client secret
            timeout: Request timeout in seconds
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self._sp: Optional[spotipy.Spotify] = None

    def is_configured(self) -> bool:
        """Check if app credentials are present."""
        return bool(self.client_id) and bool(self.client_secret)

    def _client(self) -> spotipy.Spotify:
        """Create the spotipy client lazily; it caches its own token."""
        if self._sp is None:
            auth = SpotifyClientCredentials(
                client_id=self.client_id,
                client_secret=self.client_secret,
            )
            self._sp = spotipy.Spotify(
                auth_manager=auth,
                requests_timeout=self.timeout,
                retries=0,
            )
        return self._sp

    def search_track(self, artist: str, title: str) -> MetadataResult:
        """
        Search Spotify for a track and suggest a genre from its artist.

        Args:
            artist: Artist name
            title: Track title

        Returns:
            MetadataResult (Low confidence when nothing matched)

        Raises:
            ProviderError: On missing credentials, auth or search failure
        """
        if not self.is_configured():
            raise ProviderError(self.name, "API credentials not configured")

        sp = self._client()
        query = f"artist:{_quote_if_multiword(artist)} track:{_quote_if_multiword(title)}"

        try:
            results = sp.search(q=query, type="track", limit=1)
        except (spotipy.exceptions.SpotifyException,
                spotipy.oauth2.SpotifyOauthError,
                requests.exceptions.RequestException) as e:
            raise ProviderError(self.name, f"Search failed: {e}") from e

        items = (results or {}).get("tracks", {}).get("items") or []
        if not items or not items[0].get("artists"):
            return MetadataResult(
                genre=None,
                artist=artist,
                confidence=Confidence.LOW,
                source=f"{self.name} (No match)",
            )

        first_artist = items[0]["artists"][0]
        artist_name = first_artist.get("name") or artist

        try:
            details = sp.artist(first_artist["id"])
        except (spotipy.exceptions.SpotifyException,
                requests.exceptions.RequestException):
            # The track matched; only the genre is unknown
            return MetadataResult(
                genre=None,
                artist=artist_name,
                confidence=Confidence.MEDIUM,
                source=self.name,
            )

        genres = (details or {}).get("genres") or []
        genre = genres[0] if genres else None

        return MetadataResult(
            genre=genre,
            artist=artist_name,
            confidence=Confidence.HIGH if genre else Confidence.MEDIUM,
            source=self.name,
        )
