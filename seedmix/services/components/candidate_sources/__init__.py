"""
Candidate Sources

Data sources tried, in order, by the candidate fallback chain.
"""

from .base_source import BaseCandidateSource, TierOutcome
from .similar_tracks import SimilarTracksSource
from .fallback_sources import TagTopTracksSource, ArtistTopTrackSource

__all__ = [
    "BaseCandidateSource",
    "TierOutcome",
    "SimilarTracksSource",
    "TagTopTracksSource",
    "ArtistTopTrackSource",
]
