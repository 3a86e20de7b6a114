"""
Per-Seed Ranking

Scores one seed's candidates against listener preferences and orders them
best first by (boost, provider relevance).
"""

import asyncio
from typing import List, Optional, Sequence

import structlog

from ...models.metadata_models import CandidateTrack, ScoredCandidate, SeedRanking
from ..provider_gateway import ProviderGateway
from .fallback_chain import ChainResult
from .preference_scorer import PreferenceScorer

logger = structlog.get_logger(__name__)


async def fetch_tags_bounded(
    gateway: ProviderGateway,
    title: str,
    artist: str,
    semaphore: Optional[asyncio.Semaphore] = None
) -> List[str]:
    """Fetch a track's tags, holding the request's tag-lookup slot if given."""
    if semaphore is None:
        return await gateway.top_tags(title, artist)
    async with semaphore:
        return await gateway.top_tags(title, artist)


def sort_scored_candidates(candidates: Sequence[ScoredCandidate]) -> List[ScoredCandidate]:
    """Boost first, relevance second; full ties keep provider order."""
    return sorted(candidates, key=lambda c: (-c.preference_boost, -c.match_score))


class SeedRanker:
    """Turns a fallback-chain result into a SeedRanking."""

    def __init__(
        self,
        gateway: ProviderGateway,
        scorer: PreferenceScorer,
        tag_semaphore: Optional[asyncio.Semaphore] = None
    ):
        self.gateway = gateway
        self.scorer = scorer
        self.tag_semaphore = tag_semaphore
        self.logger = logger.bind(component="SeedRanker")

    async def _score(self, candidate: CandidateTrack) -> ScoredCandidate:
        tags: List[str] = []
        if self.scorer.needs_tags:
            tags = await fetch_tags_bounded(
                self.gateway,
                candidate.track.title,
                candidate.track.artist,
                self.tag_semaphore
            )
        return ScoredCandidate(
            track=candidate.track,
            match_score=candidate.match_score,
            preference_boost=self.scorer.score(candidate.track, tags)
        )

    async def rank(self, result: ChainResult) -> SeedRanking:
        """
        Score and order a seed's candidates.

        Tag lookups for the candidates run concurrently, bounded by the
        request's tag-lookup semaphore.
        """
        if result.is_empty():
            return SeedRanking(seed=result.seed, source=result.source)

        scored = await asyncio.gather(*(self._score(c) for c in result.candidates))
        ranking = SeedRanking(
            seed=result.seed,
            candidates=sort_scored_candidates(scored),
            source=result.source
        )

        self.logger.debug(
            "Seed ranked",
            seed=result.seed.key,
            source=result.source,
            candidates_count=len(ranking),
            boosted=sum(1 for c in ranking.candidates if c.preference_boost > 0)
        )
        return ranking
