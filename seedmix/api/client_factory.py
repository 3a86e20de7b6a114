"""
API Client Factory

Creates configured Last.fm clients from the system configuration. Clients
built with the same pacing share one rate limiter.
"""

from typing import Dict, Optional

import structlog

from .lastfm_client import LastFmClient
from .rate_limiter import UnifiedRateLimiter
from ..models.config_models import SystemConfig

logger = structlog.get_logger(__name__)


class APIClientFactory:
    """
    Factory for creating configured API clients.

    Centralizes rate limiting, timeout and retry configuration so that the
    provider gateway never reads the environment itself.
    """

    def __init__(self, system_config: Optional[SystemConfig] = None):
        """
        Initialize client factory.

        Args:
            system_config: System configuration (defaults to built-in settings)
        """
        self.system_config = system_config or SystemConfig()
        self.logger = logger.bind(service="APIClientFactory")

        # Shared across clients with the same pacing
        self._rate_limiters: Dict[str, UnifiedRateLimiter] = {}

        self.logger.info("API Client Factory initialized")

    def create_lastfm_client(
        self,
        api_key: Optional[str] = None,
        rate_limit: Optional[float] = None
    ) -> LastFmClient:
        """
        Create configured Last.fm client.

        Args:
            api_key: Last.fm API key (defaults to system config)
            rate_limit: Requests per second (defaults to system config; None = unpaced)

        Returns:
            Configured LastFmClient instance

        Raises:
            ValueError: If no API key is available
        """
        api_key = api_key or self.system_config.lastfm_api_key
        if rate_limit is None:
            rate_limit = self.system_config.lastfm_rate_limit

        if not api_key:
            raise ValueError("Last.fm API key is required (set LASTFM_API_KEY)")

        rate_limiter_key = f"lastfm_{rate_limit}"
        if rate_limiter_key not in self._rate_limiters:
            self._rate_limiters[rate_limiter_key] = UnifiedRateLimiter.for_lastfm(rate_limit)

        client = LastFmClient(
            api_key=api_key,
            rate_limiter=self._rate_limiters[rate_limiter_key],
            base_url=self.system_config.lastfm_base_url,
            timeout=self.system_config.request_timeout_seconds,
            retries=self.system_config.provider_retries
        )

        self.logger.info(
            "Last.fm client created",
            rate_limit=rate_limit,
            timeout=self.system_config.request_timeout_seconds
        )

        return client
