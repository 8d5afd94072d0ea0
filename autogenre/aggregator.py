"""Fan a lookup out to every configured metadata provider."""

import logging
from typing import List, Optional, Protocol, Sequence

from autogenre.beatport_client import BeatportClient
from autogenre.models import AppSettings, MetadataResult
from autogenre.musicbrainz_client import MusicBrainzClient
from autogenre.ranking import rank_suggestions
from autogenre.spotify_client import SpotifyClient

logger = logging.getLogger(__name__)


class MetadataProvider(Protocol):
    """What the aggregator needs from a provider client."""

    name: str

    def is_configured(self) -> bool:
        ...

    def search_track(self, artist: str, title: str) -> MetadataResult:
        ...


class MetadataAggregator:
    """Queries providers one after another and collects their answers."""

    def __init__(self, providers: Sequence[MetadataProvider]):
        self.providers = list(providers)

    @property
    def active_providers(self) -> List[MetadataProvider]:
        """Providers with usable configuration."""
        return [p for p in self.providers if p.is_configured()]

    def fetch(self, artist: str, title: str) -> List[MetadataResult]:
        """
        Collect one suggestion per answering provider.

        Unconfigured providers are skipped. A provider that raises is logged
        and contributes nothing; the remaining providers are still asked.

        Args:
            artist: Artist name (non-empty)
            title: Track title (non-empty)

        Returns:
            Suggestions in provider response order (possibly empty).
        """
        if not artist or not title:
            raise ValueError("artist and title are required for a lookup")

        results = []
        for provider in self.providers:
            if not provider.is_configured():
                logger.debug(f"Skipping {provider.name}: not configured")
                continue
            try:
                result = provider.search_track(artist, title)
            except Exception as e:
                logger.warning(
                    f"{provider.name} lookup failed for '{artist} - {title}': {e}"
                )
                continue
            if result is not None:
                results.append(result)

        return results


def fetch_metadata(aggregator: MetadataAggregator, artist: str,
                   title: str) -> List[MetadataResult]:
    """Aggregate then rank: the lookup as seen by the resolution driver."""
    return rank_suggestions(aggregator.fetch(artist, title))


def build_providers(config: Optional[dict] = None,
                    settings: Optional[AppSettings] = None,
                    skip_spotify: bool = False,
                    skip_beatport: bool = False,
                    skip_musicbrainz: bool = False) -> List[MetadataProvider]:
    """
    Create provider clients in lookup order: Spotify, Beatport, MusicBrainz.

    Credentials from the environment (config) take precedence over settings.

    Args:
        config: Dictionary from load_config()
        settings: Persisted AppSettings
        skip_*: Leave the named provider out entirely

    Returns:
        List of provider clients.
    """
    config = config or {}
    settings = settings or AppSettings()

    providers: List[MetadataProvider] = []

    if not skip_spotify:
        providers.append(SpotifyClient(
            config.get("spotify_client_id") or settings.spotify_client_id or None,
            config.get("spotify_client_secret") or settings.spotify_client_secret or None,
        ))

    if not skip_beatport:
        providers.append(BeatportClient(
            config.get("beatport_username") or settings.beatport_username or None,
            config.get("beatport_password") or settings.beatport_password or None,
        ))

    if not skip_musicbrainz:
        providers.append(MusicBrainzClient())

    return providers
