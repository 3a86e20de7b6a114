"""
API Module

Last.fm client layer and the HTTP middleware of the SeedMix service.
Provides consistent HTTP handling, rate limiting, and error handling.
"""

from .base_client import BaseAPIClient, APIClientError
from .rate_limiter import UnifiedRateLimiter
from .lastfm_client import LastFmClient, TrackMetadata, ArtistMetadata
from .client_factory import APIClientFactory

__all__ = [
    # Base infrastructure
    "BaseAPIClient",
    "APIClientError",
    "UnifiedRateLimiter",

    # LastFM client and models
    "LastFmClient",
    "TrackMetadata",
    "ArtistMetadata",

    # Client factory
    "APIClientFactory",
]
