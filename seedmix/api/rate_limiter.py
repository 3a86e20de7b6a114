"""
Unified Rate Limiter

Configurable rate limiting shared by outbound API clients and the inbound
request middleware. Supports a per-second token bucket and per-minute /
per-hour sliding windows; a limiter configured with no limits never waits.
"""

import asyncio
import time
from collections import deque
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class UnifiedRateLimiter:
    """
    Unified rate limiter supporting multiple rate limit strategies.

    Supports:
    - Per-second limiting with a token bucket for bursts
    - Per-minute and per-hour sliding windows
    - Blocking waits for outbound calls (``wait_if_needed``)
    - Non-blocking admission for inbound requests (``try_acquire``)
    """

    def __init__(
        self,
        calls_per_second: Optional[float] = None,
        calls_per_minute: Optional[int] = None,
        calls_per_hour: Optional[int] = None,
        burst_size: Optional[int] = None,
        service_name: str = "api"
    ):
        """
        Initialize rate limiter with specified limits.

        Args:
            calls_per_second: Maximum calls per second (float for sub-second intervals)
            calls_per_minute: Maximum calls per minute
            calls_per_hour: Maximum calls per hour
            burst_size: Maximum burst size (defaults to calls_per_second * 2)
            service_name: Service name for logging
        """
        self.calls_per_second = calls_per_second
        self.calls_per_minute = calls_per_minute
        self.calls_per_hour = calls_per_hour
        self.service_name = service_name

        if calls_per_second:
            self.burst_size = burst_size or max(int(calls_per_second * 2), 1)
            self.tokens = float(self.burst_size)
            self.last_refill = time.time()
        else:
            self.burst_size = None
            self.tokens = 0.0
            self.last_refill = 0.0

        self.request_times: deque = deque()
        self.lock = asyncio.Lock()

        self.logger = logger.bind(service=f"RateLimiter-{service_name}")

    @classmethod
    def for_lastfm(cls, calls_per_second: Optional[float] = None) -> "UnifiedRateLimiter":
        """
        Create rate limiter for the Last.fm API.

        Args:
            calls_per_second: Calls per second; None disables pacing

        Returns:
            Configured rate limiter for Last.fm
        """
        return cls(calls_per_second=calls_per_second, service_name="LastFM")

    @classmethod
    def for_client(cls, calls_per_minute: int) -> "UnifiedRateLimiter":
        """Create a per-client limiter for inbound HTTP requests."""
        return cls(calls_per_minute=calls_per_minute, service_name="inbound")

    @property
    def is_unlimited(self) -> bool:
        return not (self.calls_per_second or self.calls_per_minute or self.calls_per_hour)

    async def wait_if_needed(self) -> None:
        """
        Wait if necessary to respect rate limits.

        Call before making each outbound request.
        """
        if self.is_unlimited:
            return

        async with self.lock:
            current_time = time.time()
            wait_time = self._required_wait(current_time)

            if wait_time > 0:
                self.logger.debug(
                    "Rate limit wait required",
                    wait_time=wait_time,
                    current_requests=len(self.request_times)
                )
                await asyncio.sleep(wait_time)
                current_time = time.time()
                self._refill_tokens(current_time)

            self._record(current_time)

    def try_acquire(self, current_time: Optional[float] = None) -> bool:
        """
        Admit a call without waiting.

        Returns:
            True if the call is within limits (and is recorded), False otherwise
        """
        if self.is_unlimited:
            return True

        current_time = time.time() if current_time is None else current_time
        if self._required_wait(current_time) > 0:
            return False
        self._record(current_time)
        return True

    def retry_after(self, current_time: Optional[float] = None) -> float:
        """Seconds until the next call would be admitted."""
        if self.is_unlimited:
            return 0.0
        current_time = time.time() if current_time is None else current_time
        return self._required_wait(current_time)

    def _required_wait(self, current_time: float) -> float:
        self._cleanup_old_requests(current_time)

        wait_time = 0.0
        if self.calls_per_second:
            wait_time = max(wait_time, self._check_per_second_limit(current_time))
        if self.calls_per_minute:
            wait_time = max(wait_time, self._check_window_limit(current_time, 60, self.calls_per_minute))
        if self.calls_per_hour:
            wait_time = max(wait_time, self._check_window_limit(current_time, 3600, self.calls_per_hour))
        return wait_time

    def _record(self, current_time: float) -> None:
        self.request_times.append(current_time)
        if self.calls_per_second and self.tokens >= 1:
            self.tokens -= 1

    def _refill_tokens(self, current_time: float) -> None:
        time_elapsed = current_time - self.last_refill
        self.tokens = min(float(self.burst_size), self.tokens + time_elapsed * self.calls_per_second)
        self.last_refill = current_time

    def _check_per_second_limit(self, current_time: float) -> float:
        """
        Check per-second rate limit using token bucket algorithm.

        Returns:
            Wait time in seconds (0 if no wait needed)
        """
        self._refill_tokens(current_time)
        if self.tokens >= 1:
            return 0.0
        return (1.0 - self.tokens) / self.calls_per_second

    def _check_window_limit(self, current_time: float, window: int, limit: int) -> float:
        window_start = current_time - window
        recent_requests = [t for t in self.request_times if t > window_start]

        if len(recent_requests) < limit:
            return 0.0

        oldest_request = min(recent_requests)
        return max(0.0, window - (current_time - oldest_request))

    def _cleanup_old_requests(self, current_time: float) -> None:
        """Drop request timestamps outside every tracked window."""
        max_window = 0
        if self.calls_per_second or self.calls_per_minute:
            max_window = 60
        if self.calls_per_hour:
            max_window = 3600

        if max_window == 0:
            return

        cutoff_time = current_time - max_window
        while self.request_times and self.request_times[0] < cutoff_time:
            self.request_times.popleft()
