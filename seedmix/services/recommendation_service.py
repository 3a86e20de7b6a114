"""
Recommendation Service

Seed-based recommendations: resolve seeds, run each seed's candidate
fallback chain, score and rank per seed, aggregate with weighted Borda and
apply the same-artist or global fallbacks when nothing survives.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

import structlog

from ..models.config_models import SystemConfig
from ..models.metadata_models import Preferences, SeedRanking, Track
from .components import (
    CandidateFallbackChain,
    GlobalFallback,
    PreferenceScorer,
    RankAggregator,
    SameArtistConstraint,
    SeedRanker,
    SeedResolver,
    allowed_artists,
    build_fallback_chain,
    extract_valid_seed_entries
)
from .exceptions import InvalidRequestError, NoRecommendationsError
from .provider_gateway import ProviderGateway

logger = structlog.get_logger(__name__)

TRACK_IDS_REQUIRED = "track_ids (non-empty array) is required"
NO_RECOMMENDATIONS = "No recommendations available."
NO_SAME_ARTIST_RECOMMENDATIONS = "No same-artist recommendations available."


@dataclass
class RecommendationResult:
    """Final recommendations and how they were produced."""
    tracks: List[Track]
    strategy: str  # "aggregated", "global_fallback" or "same_artist_fallback"
    seeds_count: int = 0
    productive_seeds: int = 0
    processing_time: float = 0.0
    sources: List[Optional[str]] = field(default_factory=list)


class RecommendationService:
    """
    Recommendation engine over a provider gateway.

    Stateless between requests: every call builds its own chain, scorer and
    tag-lookup semaphore.
    """

    def __init__(self, gateway: ProviderGateway, system_config: Optional[SystemConfig] = None):
        """
        Initialize the recommendation service.

        Args:
            gateway: Provider gateway used for every lookup
            system_config: Limits and caps (defaults to built-in settings)
        """
        self.gateway = gateway
        self.system_config = system_config or SystemConfig()
        self.resolver = SeedResolver(gateway)
        self.aggregator = RankAggregator()
        self.same_artist = SameArtistConstraint(
            gateway, max_results=self.system_config.max_recommendations
        )
        self.global_fallback = GlobalFallback(gateway)
        self.logger = logger.bind(service="RecommendationService")

    async def recommend(
        self,
        track_ids: Any,
        preferences: Optional[Preferences] = None
    ) -> RecommendationResult:
        """
        Recommend tracks for a list of seeds.

        Args:
            track_ids: Raw seed entries; malformed ones are skipped
            preferences: Listener preferences (none by default)

        Returns:
            RecommendationResult with at most ``max_recommendations`` tracks

        Raises:
            InvalidRequestError: If ``track_ids`` is not a non-empty list
            NoRecommendationsError: If every fallback came up empty
        """
        if not isinstance(track_ids, (list, tuple)) or not track_ids:
            raise InvalidRequestError(TRACK_IDS_REQUIRED)

        preferences = preferences or Preferences()
        start_time = time.time()

        entries = extract_valid_seed_entries(track_ids)
        self.logger.info(
            "Processing recommendation request",
            entries_count=len(track_ids),
            valid_seeds=len(entries),
            same_artist_only=preferences.same_artist_only,
            has_preferences=preferences.has_scoring_preferences()
        )

        rankings = await self._rank_seeds(entries, preferences)

        tracks, strategy = await self._select(rankings, preferences)

        result = RecommendationResult(
            tracks=tracks[:self.system_config.max_recommendations],
            strategy=strategy,
            seeds_count=len(rankings),
            productive_seeds=sum(1 for r in rankings if not r.is_empty()),
            processing_time=time.time() - start_time,
            sources=[r.source for r in rankings]
        )

        self.logger.info(
            "Recommendation completed",
            strategy=result.strategy,
            results_count=len(result.tracks),
            productive_seeds=result.productive_seeds,
            processing_time=round(result.processing_time, 4)
        )
        return result

    async def _rank_seeds(
        self,
        entries: Sequence[Tuple[str, str]],
        preferences: Preferences
    ) -> List[SeedRanking]:
        # One tag-lookup budget shared by every seed of this request
        tag_semaphore = asyncio.Semaphore(self.system_config.tag_lookup_concurrency)
        chain = build_fallback_chain(
            self.gateway,
            same_artist_only=preferences.same_artist_only,
            similar_limit=self.system_config.similar_limit
        )
        ranker = SeedRanker(self.gateway, PreferenceScorer(preferences), tag_semaphore)

        # gather keeps input order
        return list(await asyncio.gather(
            *(self._rank_seed(title, artist, chain, ranker) for title, artist in entries)
        ))

    async def _rank_seed(
        self,
        title: str,
        artist: str,
        chain: CandidateFallbackChain,
        ranker: SeedRanker
    ) -> SeedRanking:
        seed = await self.resolver.resolve(title, artist)
        result = await chain.run(seed)
        return await ranker.rank(result)

    async def _select(
        self,
        rankings: Sequence[SeedRanking],
        preferences: Preferences
    ) -> Tuple[List[Track], str]:
        """Aggregate, enforce same-artist mode and apply the fallbacks."""
        productive = [ranking for ranking in rankings if not ranking.is_empty()]
        artists = allowed_artists([ranking.seed for ranking in rankings])

        if not productive:
            if preferences.same_artist_only:
                return await self._same_artist_fallback(artists)

            tracks = await self.global_fallback.recommend()
            if not tracks:
                raise NoRecommendationsError(NO_RECOMMENDATIONS)
            return tracks, "global_fallback"

        ranked = self.aggregator.rank(productive)

        if preferences.same_artist_only:
            ranked = self.same_artist.filter(ranked, artists)
            if not ranked:
                return await self._same_artist_fallback(artists)

        return ranked, "aggregated"

    async def _same_artist_fallback(self, artists) -> Tuple[List[Track], str]:
        tracks = await self.same_artist.fallback(artists)
        if not tracks:
            raise NoRecommendationsError(NO_SAME_ARTIST_RECOMMENDATIONS)
        return tracks, "same_artist_fallback"
