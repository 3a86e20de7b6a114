"""
Candidate Fallback Chain

Tries candidate sources in strict precedence for one seed and stops at the
first source that yields anything, or at a source that settles the seed even
with nothing to offer (the tag tier, once the seed has a tag). An optional
filter applies to every source's output before the emptiness check;
same-artist mode uses it to restrict candidates to the seed's artist.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

import structlog

from ...models.metadata_models import CandidateTrack, Seed, same_artist
from ..provider_gateway import ProviderGateway
from .candidate_sources import (
    BaseCandidateSource,
    SimilarTracksSource,
    TagTopTracksSource,
    ArtistTopTrackSource
)

logger = structlog.get_logger(__name__)

CandidateFilter = Callable[[Seed, CandidateTrack], bool]


def by_seed_artist(seed: Seed, candidate: CandidateTrack) -> bool:
    """Keep candidates whose artist is the seed's resolved artist."""
    return same_artist(candidate.track.artist, seed.resolved_artist)


def dedupe_candidates(candidates: Sequence[CandidateTrack]) -> List[CandidateTrack]:
    """Drop repeated keys, keeping the first (best-ranked) occurrence."""
    seen = set()
    unique = []
    for candidate in candidates:
        if candidate.key in seen:
            continue
        seen.add(candidate.key)
        unique.append(candidate)
    return unique


@dataclass
class ChainResult:
    """Candidates for one seed and the name of the source that produced them."""
    seed: Seed
    candidates: List[CandidateTrack] = field(default_factory=list)
    source: Optional[str] = None

    def is_empty(self) -> bool:
        return not self.candidates


class CandidateFallbackChain:
    """Ordered candidate sources, first non-empty result wins."""

    def __init__(
        self,
        sources: Sequence[BaseCandidateSource],
        candidate_filter: Optional[CandidateFilter] = None
    ):
        self.sources = list(sources)
        self.candidate_filter = candidate_filter
        self.logger = logger.bind(
            component="CandidateFallbackChain",
            sources=[source.name for source in self.sources]
        )

    async def run(self, seed: Seed) -> ChainResult:
        """
        Produce the richest available candidate list for a seed.

        Args:
            seed: Resolved seed

        Returns:
            ChainResult with de-duplicated candidates in provider order, or
            an empty result when every source came up empty or a source
            settled the seed without candidates
        """
        for source in self.sources:
            outcome = await source.outcome(seed)
            candidates = outcome.candidates
            fetched = len(candidates)

            if self.candidate_filter is not None:
                candidates = [c for c in candidates if self.candidate_filter(seed, c)]

            candidates = dedupe_candidates(candidates)
            if candidates:
                self.logger.info(
                    "Candidates produced",
                    seed=seed.key,
                    source=source.name,
                    fetched=fetched,
                    kept=len(candidates)
                )
                return ChainResult(seed=seed, candidates=candidates, source=source.name)

            if outcome.settled:
                self.logger.info("Source settled seed without candidates", seed=seed.key, source=source.name)
                return ChainResult(seed=seed, source=source.name)

            self.logger.debug("Source yielded nothing", seed=seed.key, source=source.name, fetched=fetched)

        self.logger.info("No candidates for seed", seed=seed.key)
        return ChainResult(seed=seed)


def build_fallback_chain(
    gateway: ProviderGateway,
    same_artist_only: bool = False,
    similar_limit: int = 100
) -> CandidateFallbackChain:
    """
    Build the chain for a request.

    Default order: similar tracks, tag top tracks, artist top track. In
    same-artist mode the tag tier is skipped (tag charts are not
    artist-restricted) and every tier's output is filtered to the seed artist.
    """
    similar = SimilarTracksSource(gateway, limit=similar_limit)
    artist_top = ArtistTopTrackSource(gateway)

    if same_artist_only:
        return CandidateFallbackChain([similar, artist_top], candidate_filter=by_seed_artist)

    tag_top = TagTopTracksSource(gateway, limit=similar_limit)
    return CandidateFallbackChain([similar, tag_top, artist_top])
