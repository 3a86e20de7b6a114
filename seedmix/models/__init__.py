"""
Models Module

Domain value objects, HTTP schemas and configuration for SeedMix.
"""

from .metadata_models import (
    TRACK_KEY_DELIM,
    Track,
    CandidateTrack,
    ScoredCandidate,
    Seed,
    SeedRanking,
    Preferences,
    make_track_key,
    normalize_name,
    same_artist
)
from .config_models import SystemConfig

__all__ = [
    "TRACK_KEY_DELIM",
    "Track",
    "CandidateTrack",
    "ScoredCandidate",
    "Seed",
    "SeedRanking",
    "Preferences",
    "make_track_key",
    "normalize_name",
    "same_artist",
    "SystemConfig",
]
