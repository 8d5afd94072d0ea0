"""MusicBrainz web service client for recording genre lookups."""

import time

import requests

from autogenre import __version__
from autogenre.errors import ProviderError
from autogenre.models import Confidence, MetadataResult


class MusicBrainzClient:
    """Client for the MusicBrainz ws/2 API. No credentials required."""

    name = "MusicBrainz"

    BASE_URL = "https://musicbrainz.org/ws/2"
    USER_AGENT = f"AutoGenre/{__version__} ( https://github.com/autogenre/autogenre )"

    def __init__(self, timeout: int = 15, min_interval: float = 1.0):
        """
        Initialize MusicBrainz client.

        Args:
            timeout: Request timeout in seconds
            min_interval: Minimum seconds between requests
        """
        self.timeout = timeout
        self.min_interval = min_interval
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": self.USER_AGENT,
            "Accept": "application/json",
        })
        self._last_request_time = 0.0

    def is_configured(self) -> bool:
        return True

    def _respect_rate_limit(self):
        """MusicBrainz allows one request per second per client."""
        elapsed = time.time() - self._last_request_time
        if elapsed < self.min_interval:
            time.sleep(self.min_interval - elapsed)

    def search_track(self, artist: str, title: str) -> MetadataResult:
        """
        Search MusicBrainz recordings and suggest a genre.

        Args:
            artist: Artist name
            title: Track title

        Returns:
            MetadataResult (Low confidence when nothing matched)

        Raises:
            ProviderError: On request or parse failure
        """
        self._respect_rate_limit()

        params = {
            "query": f"artist:{artist} AND recording:{title}",
            "fmt": "json",
            "limit": 1,
            "inc": "tags+genres",
        }

        try:
            resp = self.session.get(
                f"{self.BASE_URL}/recording",
                params=params,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.exceptions.RequestException as e:
            raise ProviderError(self.name, f"Search failed: {e}") from e
        except ValueError as e:
            raise ProviderError(self.name, f"Failed to parse response: {e}") from e
        finally:
            # Failed requests count against the limit too
            self._last_request_time = time.time()

        return self._parse_search(data, artist)

    def _parse_search(self, data: dict, artist: str) -> MetadataResult:
        """Turn a recording search response into a suggestion."""
        recordings = data.get("recordings") or []
        if not recordings:
            return MetadataResult(
                genre=None,
                artist=artist,
                confidence=Confidence.LOW,
                source=f"{self.name} (No match)",
            )

        recording = recordings[0]

        credits = recording.get("artist-credit") or []
        artist_name = credits[0].get("name") if credits else None

        # Curated genres first, folksonomy tags as fallback
        genre = None
        for key in ("genres", "tags"):
            entries = recording.get(key) or []
            if entries:
                genre = entries[0].get("name")
                break

        return MetadataResult(
            genre=genre,
            artist=artist_name or artist,
            confidence=Confidence.MEDIUM if genre else Confidence.LOW,
            source=self.name,
        )
