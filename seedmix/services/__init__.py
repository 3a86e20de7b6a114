"""
Services Module

Recommendation and track search services over an abstract provider gateway.
"""

from .exceptions import SeedMixError, InvalidRequestError, NoRecommendationsError
from .provider_gateway import ProviderGateway, LastFmGateway
from .recommendation_service import RecommendationService, RecommendationResult
from .track_search_service import TrackSearchService, normalize_output_limit

__all__ = [
    "SeedMixError",
    "InvalidRequestError",
    "NoRecommendationsError",
    "ProviderGateway",
    "LastFmGateway",
    "RecommendationService",
    "RecommendationResult",
    "TrackSearchService",
    "normalize_output_limit",
]
