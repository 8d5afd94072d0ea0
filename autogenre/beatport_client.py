"""Beatport API client for DJ-catalog genre lookups."""

import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional

import requests

from autogenre.errors import ProviderError
from autogenre.models import Confidence, MetadataResult


@dataclass
class _CachedToken:
    access_token: str
    expires_at: float


# Tokens are shared by every client in the process, keyed by username
_token_cache: Dict[str, _CachedToken] = {}
_token_lock = threading.Lock()


def clear_token_cache() -> None:
    """Forget all cached Beatport tokens."""
    with _token_lock:
        _token_cache.clear()


class BeatportClient:
    """Client for the Beatport v4 catalog API."""

    name = "Beatport"

    BASE_URL = "https://api.beatport.com/v4"
    # Public client id used by the Beatport web player for password grants
    CLIENT_ID = "oeGScrHHsv1K1vO2Mby3sHQ7oZNWpViH"
    DEFAULT_EXPIRES_IN = 3600
    EXPIRY_MARGIN = 300

    def __init__(self, username: Optional[str], password: Optional[str],
                 timeout: int = 15):
        """
        Initialize Beatport client.

        Args:
            username: Beatport account username
            password: Beatport account password
            timeout: Request timeout in seconds
        """
        self.username = username
        self.password = password
        self.timeout = timeout
        self.session = requests.Session()

    def is_configured(self) -> bool:
        """Check if account credentials are present."""
        return bool(self.username) and bool(self.password)

    def _get_access_token(self) -> str:
        """Return a cached token or request a new one with the password grant."""
        now = time.time()
        with _token_lock:
            cached = _token_cache.get(self.username)
            if cached and cached.expires_at > now:
                return cached.access_token

        try:
            resp = self.session.post(
                f"{self.BASE_URL}/auth/o/token/",
                data={
                    "grant_type": "password",
                    "client_id": self.CLIENT_ID,
                    "username": self.username,
                    "password": self.password,
                },
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise ProviderError(self.name, f"Failed to request token: {e}") from e

        if not resp.ok:
            raise ProviderError(
                self.name, f"Auth failed ({resp.status_code}): {resp.text}"
            )

        try:
            data = resp.json()
            access_token = data["access_token"]
        except (ValueError, KeyError) as e:
            raise ProviderError(self.name, f"Failed to parse token response: {e}") from e

        expires_in = data.get("expires_in") or self.DEFAULT_EXPIRES_IN
        with _token_lock:
            _token_cache[self.username] = _CachedToken(
                access_token=access_token,
                expires_at=now + expires_in - self.EXPIRY_MARGIN,
            )
        return access_token

    def search_track(self, artist: str, title: str) -> MetadataResult:
        """
        Search Beatport for a track and suggest its (sub-)genre.

        Args:
            artist: Artist name
            title: Track title

        Returns:
            MetadataResult (Low confidence when nothing matched)

        Raises:
            ProviderError: On missing credentials, auth or request failure
        """
        if not self.is_configured():
            raise ProviderError(self.name, "credentials not configured")

        access_token = self._get_access_token()

        try:
            resp = self.session.get(
                f"{self.BASE_URL}/catalog/tracks/",
                params={"q": f"{artist} {title}", "per_page": 1},
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.exceptions.RequestException as e:
            raise ProviderError(self.name, f"Search failed: {e}") from e
        except ValueError as e:
            raise ProviderError(self.name, f"Failed to parse response: {e}") from e

        return self._parse_search(data, artist)

    def _parse_search(self, data: dict, artist: str) -> MetadataResult:
        """Turn a catalog search response into a suggestion."""
        results = data.get("results") or []
        if not results:
            return MetadataResult(
                genre=None,
                artist=artist,
                confidence=Confidence.LOW,
                source=f"{self.name} (No match)",
            )

        track = results[0]
        artists = track.get("artists") or []
        artist_name = artists[0].get("name") if artists else None

        # Sub-genre is more specific, prefer it
        genre_info = track.get("sub_genre") or track.get("genre")
        genre = genre_info.get("name") if genre_info else None

        return MetadataResult(
            genre=genre,
            artist=artist_name or artist,
            confidence=Confidence.HIGH if genre else Confidence.LOW,
            source=self.name,
        )
