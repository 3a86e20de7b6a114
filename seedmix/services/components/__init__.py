"""
Recommendation Components

Building blocks of the ranking engine: seed resolution, the candidate
fallback chain, preference scoring, per-seed ranking, rank aggregation,
and the same-artist and global fallbacks.
"""

from .seed_resolver import SeedResolver, extract_valid_seed_entries
from .fallback_chain import (
    CandidateFallbackChain,
    ChainResult,
    build_fallback_chain,
    by_seed_artist,
    dedupe_candidates
)
from .preference_scorer import PreferenceScorer
from .seed_ranker import SeedRanker, fetch_tags_bounded, sort_scored_candidates
from .rank_aggregator import RankAggregator, AggregateScore, SeedContribution
from .same_artist import SameArtistConstraint, allowed_artists
from .global_fallback import GlobalFallback

__all__ = [
    "SeedResolver",
    "extract_valid_seed_entries",
    "CandidateFallbackChain",
    "ChainResult",
    "build_fallback_chain",
    "by_seed_artist",
    "dedupe_candidates",
    "PreferenceScorer",
    "SeedRanker",
    "fetch_tags_bounded",
    "sort_scored_candidates",
    "RankAggregator",
    "AggregateScore",
    "SeedContribution",
    "SameArtistConstraint",
    "allowed_artists",
    "GlobalFallback",
]
