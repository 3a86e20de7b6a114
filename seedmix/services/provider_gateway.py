"""
Provider Gateway

The capability set the ranking engine needs from a music metadata provider,
and its Last.fm implementation. Every capability fails closed: transport
errors, timeouts and malformed payloads come back as an empty list or None
and never raise past this boundary.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

import structlog

from ..api.client_factory import APIClientFactory
from ..api.lastfm_client import LastFmClient
from ..models.config_models import SystemConfig
from ..models.metadata_models import CandidateTrack, Track

logger = structlog.get_logger(__name__)


class ProviderGateway(ABC):
    """Abstract music metadata provider."""

    async def start(self) -> None:
        """Acquire network resources. No-op by default."""

    async def close(self) -> None:
        """Release network resources. No-op by default."""

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @abstractmethod
    async def search_best_match(self, title: str, artist: str) -> Optional[Track]:
        """Best provider match for a (title, artist) pair, used for autocorrection."""

    @abstractmethod
    async def similar_tracks(self, title: str, artist: str, limit: int) -> List[CandidateTrack]:
        """Tracks similar to the given one, with relevance in [0, 1]."""

    @abstractmethod
    async def top_tag(self, title: str, artist: str) -> Optional[str]:
        """The single best descriptive tag of a track, lower-cased."""

    @abstractmethod
    async def top_tags(self, title: str, artist: str) -> List[str]:
        """All descriptive tags of a track, lower-cased."""

    @abstractmethod
    async def tag_top_tracks(self, tag: str, limit: int) -> List[CandidateTrack]:
        """Most popular tracks for a tag, relevance 0."""

    @abstractmethod
    async def artist_top_track(self, artist: str) -> Optional[Track]:
        """An artist's single most popular track."""

    @abstractmethod
    async def global_top_track(self) -> Optional[Track]:
        """The top track of the provider-wide chart."""

    @abstractmethod
    async def search_tracks(self, title: str, limit: int) -> List[Track]:
        """Title search, provider relevance order."""

    @abstractmethod
    async def resolve_artist(self, name: str) -> Optional[str]:
        """Canonical name of the best artist match."""

    @abstractmethod
    async def artist_top_tracks(self, artist: str, limit: int) -> List[Track]:
        """An artist's most popular tracks."""

    def get_status(self) -> str:
        return "configured"


class LastFmGateway(ProviderGateway):
    """
    Provider gateway backed by the Last.fm web service.

    The LastFmClient already converts every failure into an empty result;
    this class maps its metadata onto the domain models.
    """

    def __init__(self, client: LastFmClient):
        self.client = client
        self.logger = logger.bind(component="LastFmGateway")

    @classmethod
    def from_config(
        cls,
        system_config: SystemConfig,
        factory: Optional[APIClientFactory] = None
    ) -> "LastFmGateway":
        """
        Build a gateway from configuration.

        Raises:
            ValueError: If no Last.fm API key is configured
        """
        factory = factory or APIClientFactory(system_config)
        return cls(factory.create_lastfm_client())

    async def start(self) -> None:
        await self.client.__aenter__()
        self.logger.info("Last.fm gateway started")

    async def close(self) -> None:
        await self.client.close()
        self.logger.info("Last.fm gateway closed")

    def get_status(self) -> str:
        return "active" if self.client.session is not None else "inactive"

    async def search_best_match(self, title: str, artist: str) -> Optional[Track]:
        matches = await self.client.search_tracks(title, artist=artist, limit=1)
        if not matches:
            return None
        return Track.from_lastfm(matches[0])

    async def similar_tracks(self, title: str, artist: str, limit: int) -> List[CandidateTrack]:
        similar = await self.client.get_similar_tracks(artist, title, limit=limit)
        return [CandidateTrack.from_lastfm(track) for track in similar]

    async def top_tag(self, title: str, artist: str) -> Optional[str]:
        tags = await self.client.get_track_top_tags(artist, title)
        return tags[0] if tags else None

    async def top_tags(self, title: str, artist: str) -> List[str]:
        return await self.client.get_track_top_tags(artist, title)

    async def tag_top_tracks(self, tag: str, limit: int) -> List[CandidateTrack]:
        tracks = await self.client.get_tag_top_tracks(tag, limit=limit)
        return [CandidateTrack(track=Track.from_lastfm(track)) for track in tracks]

    async def artist_top_track(self, artist: str) -> Optional[Track]:
        tracks = await self.client.get_artist_top_tracks(artist, limit=1)
        if not tracks:
            return None
        return Track.from_lastfm(tracks[0])

    async def global_top_track(self) -> Optional[Track]:
        tracks = await self.client.get_chart_top_tracks(limit=1)
        if not tracks:
            return None
        return Track.from_lastfm(tracks[0])

    async def search_tracks(self, title: str, limit: int) -> List[Track]:
        tracks = await self.client.search_tracks(title, limit=limit)
        return [Track.from_lastfm(track) for track in tracks]

    async def resolve_artist(self, name: str) -> Optional[str]:
        artists = await self.client.search_artists(name, limit=1)
        return artists[0].name if artists else None

    async def artist_top_tracks(self, artist: str, limit: int) -> List[Track]:
        tracks = await self.client.get_artist_top_tracks(artist, limit=limit)
        return [Track.from_lastfm(track) for track in tracks]
