"""
Tests for UnifiedRateLimiter.
"""

import pytest

from seedmix.api.rate_limiter import UnifiedRateLimiter


class TestUnifiedRateLimiter:

    def test_unlimited_admits_everything(self):
        limiter = UnifiedRateLimiter.for_lastfm()

        assert limiter.is_unlimited
        assert all(limiter.try_acquire(100.0) for _ in range(1000))
        assert limiter.retry_after(100.0) == 0.0

    @pytest.mark.asyncio
    async def test_unlimited_never_waits(self):
        limiter = UnifiedRateLimiter.for_lastfm()

        await limiter.wait_if_needed()

        assert len(limiter.request_times) == 0

    def test_per_minute_window(self):
        """The window slides: the oldest call ages out after 60 seconds."""
        limiter = UnifiedRateLimiter.for_client(2)

        assert limiter.try_acquire(100.0)
        assert limiter.try_acquire(100.5)
        assert not limiter.try_acquire(101.0)
        assert limiter.retry_after(101.0) == pytest.approx(59.0)
        assert limiter.try_acquire(160.1)

    def test_rejected_calls_are_not_recorded(self):
        limiter = UnifiedRateLimiter.for_client(1)

        limiter.try_acquire(10.0)
        limiter.try_acquire(11.0)
        limiter.try_acquire(12.0)

        assert list(limiter.request_times) == [10.0]

    def test_per_second_token_bucket(self):
        limiter = UnifiedRateLimiter(calls_per_second=1, burst_size=1, service_name="test")
        now = limiter.last_refill

        assert limiter.try_acquire(now)
        assert not limiter.try_acquire(now)
        assert limiter.try_acquire(now + 1.0)
