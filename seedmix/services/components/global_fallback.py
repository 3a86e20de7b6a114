"""
Global Fallback

Last-resort single recommendation taken from the provider-wide chart.
"""

from typing import List

import structlog

from ...models.metadata_models import Track
from ..provider_gateway import ProviderGateway

logger = structlog.get_logger(__name__)


class GlobalFallback:
    """Recommends the chart's top track when no seed produced candidates."""

    def __init__(self, gateway: ProviderGateway):
        self.gateway = gateway

    async def recommend(self) -> List[Track]:
        track = await self.gateway.global_top_track()
        if track is None:
            logger.warning("Global chart returned nothing")
            return []
        logger.info("Global fallback used", track=track.key)
        return [track]
