"""
Shared fixtures.

Provides an in-memory provider gateway that records every call, so tests
can assert which fallback tiers ran.
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple

import pytest

from seedmix.models.config_models import SystemConfig
from seedmix.models.metadata_models import CandidateTrack, Track
from seedmix.services.provider_gateway import ProviderGateway


class FakeProviderGateway(ProviderGateway):
    """Provider gateway backed by dictionaries configured per test."""

    def __init__(self):
        self.corrections: Dict[Tuple[str, str], Track] = {}
        self.similar: Dict[Tuple[str, str], List[CandidateTrack]] = {}
        self.tags: Dict[Tuple[str, str], List[str]] = {}
        self.tag_tracks: Dict[str, List[CandidateTrack]] = {}
        self.artist_tracks: Dict[str, List[Track]] = {}
        self.chart: List[Track] = []
        self.search_results: Dict[str, List[Track]] = {}
        self.artist_matches: Dict[str, str] = {}
        self.raise_on: Set[str] = set()
        self.calls: List[Tuple] = []
        self.started = False
        self.closed = False

    # Configuration helpers
    def set_correction(self, title, artist, resolved_title, resolved_artist):
        self.corrections[(title, artist)] = Track(title=resolved_title, artist=resolved_artist)

    def set_similar(self, title, artist, items: Iterable[Tuple[str, str, float]]):
        self.similar[(title, artist)] = [
            CandidateTrack(track=Track(title=t, artist=a), match_score=m) for t, a, m in items
        ]

    def set_tags(self, title, artist, tags: Iterable[str]):
        self.tags[(title, artist)] = list(tags)

    def set_tag_tracks(self, tag, items: Iterable[Tuple[str, str]]):
        self.tag_tracks[tag] = [CandidateTrack(track=Track(title=t, artist=a)) for t, a in items]

    def set_artist_tracks(self, artist, items: Iterable[Tuple[str, str]]):
        self.artist_tracks[artist] = [Track(title=t, artist=a) for t, a in items]

    def set_chart(self, items: Iterable[Tuple[str, str]]):
        self.chart = [Track(title=t, artist=a) for t, a in items]

    def set_search(self, title, items: Iterable[Tuple[str, str]]):
        self.search_results[title] = [Track(title=t, artist=a) for t, a in items]

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)

    def _record(self, method, *args):
        self.calls.append((method,) + args)
        if method in self.raise_on:
            raise RuntimeError(f"{method} exploded")

    # ProviderGateway
    async def start(self) -> None:
        self.started = True

    async def close(self) -> None:
        self.closed = True

    async def search_best_match(self, title, artist) -> Optional[Track]:
        self._record("search_best_match", title, artist)
        return self.corrections.get((title, artist))

    async def similar_tracks(self, title, artist, limit) -> List[CandidateTrack]:
        self._record("similar_tracks", title, artist, limit)
        return list(self.similar.get((title, artist), []))[:limit]

    async def top_tag(self, title, artist) -> Optional[str]:
        self._record("top_tag", title, artist)
        tags = self.tags.get((title, artist), [])
        return tags[0] if tags else None

    async def top_tags(self, title, artist) -> List[str]:
        self._record("top_tags", title, artist)
        return list(self.tags.get((title, artist), []))

    async def tag_top_tracks(self, tag, limit) -> List[CandidateTrack]:
        self._record("tag_top_tracks", tag, limit)
        return list(self.tag_tracks.get(tag, []))[:limit]

    async def artist_top_track(self, artist) -> Optional[Track]:
        self._record("artist_top_track", artist)
        tracks = self.artist_tracks.get(artist, [])
        return tracks[0] if tracks else None

    async def global_top_track(self) -> Optional[Track]:
        self._record("global_top_track")
        return self.chart[0] if self.chart else None

    async def search_tracks(self, title, limit) -> List[Track]:
        self._record("search_tracks", title, limit)
        return list(self.search_results.get(title, []))[:limit]

    async def resolve_artist(self, name) -> Optional[str]:
        self._record("resolve_artist", name)
        return self.artist_matches.get(name)

    async def artist_top_tracks(self, artist, limit) -> List[Track]:
        self._record("artist_top_tracks", artist, limit)
        return list(self.artist_tracks.get(artist, []))[:limit]


@pytest.fixture
def gateway():
    """Fresh fake gateway with nothing configured."""
    return FakeProviderGateway()


@pytest.fixture
def system_config():
    """Configuration used by service and API tests (inbound rate limiting off)."""
    return SystemConfig(
        lastfm_api_key="test_key",
        rate_limit_enabled=False,
        log_level="WARNING"
    )
