"""
Same-Artist Constraint

Post-aggregation enforcement of same-artist mode and its fallback: when
nothing survives, recommend the top track of each seed artist instead.
"""

import asyncio
from typing import Dict, List, Sequence

import structlog

from ...models.metadata_models import Seed, Track, normalize_name
from ..provider_gateway import ProviderGateway

logger = structlog.get_logger(__name__)


def allowed_artists(seeds: Sequence[Seed]) -> Dict[str, str]:
    """
    Distinct resolved seed artists, in seed order.

    Maps the case-folded name to the first spelling seen, which is the one
    used for provider lookups.
    """
    artists: Dict[str, str] = {}
    for seed in seeds:
        artists.setdefault(normalize_name(seed.resolved_artist), seed.resolved_artist)
    return artists


class SameArtistConstraint:
    """Keeps recommendations restricted to the seed artists."""

    def __init__(self, gateway: ProviderGateway, max_results: int = 3):
        self.gateway = gateway
        self.max_results = max_results
        self.logger = logger.bind(component="SameArtistConstraint")

    def filter(self, tracks: Sequence[Track], artists: Dict[str, str]) -> List[Track]:
        """Drop tracks whose artist is not one of the allowed artists."""
        kept = [track for track in tracks if normalize_name(track.artist) in artists]
        if len(kept) < len(tracks):
            self.logger.debug("Dropped off-artist tracks", dropped=len(tracks) - len(kept))
        return kept

    async def fallback(self, artists: Dict[str, str]) -> List[Track]:
        """
        Top track of every allowed artist, up to ``max_results``.

        Returns:
            De-duplicated tracks in seed-artist order (may be empty)
        """
        if not artists:
            return []

        top_tracks = await asyncio.gather(
            *(self.gateway.artist_top_track(name) for name in artists.values())
        )

        results: List[Track] = []
        seen = set()
        for track in top_tracks:
            if track is None or track.key in seen:
                continue
            if normalize_name(track.artist) not in artists:
                continue
            seen.add(track.key)
            results.append(track)

        self.logger.info(
            "Same-artist fallback",
            artists=list(artists.values()),
            results_count=len(results)
        )
        return results[:self.max_results]
