"""
Similar Tracks Source

First tier of the fallback chain: the provider's tracks-similar-to lookup,
carrying the provider's relevance for each item.
"""

from typing import List

from ....models.metadata_models import CandidateTrack, Seed
from ...provider_gateway import ProviderGateway
from .base_source import BaseCandidateSource


class SimilarTracksSource(BaseCandidateSource):
    """Tracks the provider considers similar to the seed."""

    name = "similar_tracks"

    def __init__(self, gateway: ProviderGateway, limit: int = 100):
        super().__init__(gateway)
        self.limit = limit

    async def generate(self, seed: Seed) -> List[CandidateTrack]:
        candidates = await self.gateway.similar_tracks(
            seed.resolved_title, seed.resolved_artist, self.limit
        )
        self.logger.debug(
            "Similar tracks fetched",
            seed=seed.key,
            candidates_count=len(candidates)
        )
        return candidates
