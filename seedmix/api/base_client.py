"""
Base API Client

Provides unified HTTP request handling, rate limiting, and error handling
for external API clients in the SeedMix service.
"""

import asyncio
import json
import random
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import aiohttp
import structlog

from .rate_limiter import UnifiedRateLimiter

logger = structlog.get_logger(__name__)


class APIClientError(Exception):
    """Transport, HTTP or API-level failure of an external call."""
    pass


class BaseAPIClient(ABC):
    """
    Base HTTP client with unified request handling, rate limiting, and error handling.

    Subclasses supply API-specific error extraction. The session is opened by
    the async context manager and every request is bounded by ``timeout``.
    """

    def __init__(
        self,
        base_url: str,
        rate_limiter: UnifiedRateLimiter,
        timeout: int = 10,
        retries: int = 0,
        service_name: str = "api"
    ):
        """
        Initialize base API client.

        Args:
            base_url: Base URL for the API
            rate_limiter: Rate limiter instance for this client
            timeout: Request timeout in seconds
            retries: Retry attempts after the first failure
            service_name: Service name for logging and identification
        """
        self.base_url = base_url.rstrip('/')
        self.rate_limiter = rate_limiter
        self.timeout = timeout
        self.retries = retries
        self.service_name = service_name
        self.session: Optional[aiohttp.ClientSession] = None

        self.logger = logger.bind(
            service=service_name,
            component="BaseAPIClient",
            base_url=base_url
        )

        self.logger.debug("Base API client initialized", timeout=timeout, retries=retries)

    async def __aenter__(self):
        """Async context manager entry."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self.logger.debug("API client session started")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("API client session closed")

    async def _make_request(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        retries: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Make rate-limited HTTP request with error handling.

        Args:
            endpoint: API endpoint (relative to base_url)
            params: Query parameters
            method: HTTP method
            headers: Additional headers
            retries: Retry attempts (defaults to the client setting)

        Returns:
            Parsed JSON response data

        Raises:
            APIClientError: For timeouts, transport errors, HTTP errors and
                API errors reported in the response body
        """
        if not self.session:
            self.logger.error("Client not initialized")
            raise RuntimeError(f"{self.service_name} client not initialized. Use async context manager.")

        retries = self.retries if retries is None else retries

        await self.rate_limiter.wait_if_needed()

        url = f"{self.base_url}/{endpoint.lstrip('/')}" if endpoint else self.base_url
        request_params = params or {}
        request_headers = dict(headers or {})
        request_headers.setdefault('User-Agent', f'SeedMix-{self.service_name}/1.0')

        for attempt in range(retries + 1):
            try:
                self.logger.debug(
                    "Making API request",
                    attempt=attempt + 1,
                    max_attempts=retries + 1,
                    method=method,
                    endpoint=endpoint,
                    api_method=request_params.get("method")
                )

                async with self.session.request(
                    method=method,
                    url=url,
                    params=request_params if method == "GET" else None,
                    json=request_params if method in ["POST", "PUT", "PATCH"] else None,
                    headers=request_headers
                ) as response:

                    if response.status == 200:
                        data = await self._parse_response(response)

                        error_info = self._extract_api_error(data)
                        if error_info:
                            self.logger.warning(
                                "API error in response body",
                                error=error_info,
                                api_method=request_params.get("method")
                            )
                            raise APIClientError(f"{self.service_name} API error: {error_info}")

                        return data

                    self.logger.warning(
                        f"{self.service_name} HTTP error",
                        status=response.status,
                        api_method=request_params.get("method"),
                        attempt=attempt + 1
                    )

                    # 4xx other than 429 will not get better on retry
                    if 400 <= response.status < 500 and response.status != 429:
                        raise APIClientError(f"{self.service_name} client error: {response.status}")

                    if attempt == retries:
                        raise APIClientError(
                            f"{self.service_name} request failed with status {response.status}"
                        )

            except asyncio.TimeoutError as e:
                self.logger.warning(
                    "Request timeout",
                    attempt=attempt + 1,
                    api_method=request_params.get("method"),
                    timeout=self.timeout
                )
                if attempt == retries:
                    raise APIClientError(f"{self.service_name} request timed out") from e

            except aiohttp.ClientError as e:
                self.logger.warning(
                    "HTTP client error",
                    error=str(e),
                    error_type=type(e).__name__,
                    attempt=attempt + 1,
                    api_method=request_params.get("method")
                )
                if attempt == retries:
                    raise APIClientError(f"{self.service_name} client error: {e}") from e

            await self._exponential_backoff(attempt)

        raise APIClientError(f"{self.service_name} request failed after {retries + 1} attempts")

    async def _parse_response(self, response: aiohttp.ClientResponse) -> Dict[str, Any]:
        """
        Parse API response. Can be overridden by subclasses for custom parsing.

        Raises:
            APIClientError: If the body is not a JSON object
        """
        try:
            data = await response.json(content_type=None)
        except (json.JSONDecodeError, aiohttp.ContentTypeError) as e:
            self.logger.error(f"{self.service_name} invalid JSON response", error=str(e))
            raise APIClientError(f"{self.service_name} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise APIClientError(f"{self.service_name} returned a non-object payload")
        return data

    @abstractmethod
    def _extract_api_error(self, data: Dict[str, Any]) -> Optional[str]:
        """
        Extract API-specific error information from response data.

        Returns:
            Error message if found, None otherwise
        """
        pass

    async def _exponential_backoff(self, attempt: int, base_delay: float = 1.0):
        """Exponential backoff with jitter before a retry."""
        delay = base_delay * (2 ** attempt)
        jitter = random.uniform(0.1, 0.3) * delay
        total_delay = min(delay + jitter, 60.0)

        self.logger.debug("Backing off before retry", attempt=attempt + 1, delay=total_delay)
        await asyncio.sleep(total_delay)
