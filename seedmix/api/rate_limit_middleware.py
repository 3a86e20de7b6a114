"""
Inbound Rate Limiting Middleware

Per-client request limiting for the ``/api`` routes. Each client address gets
its own sliding-window limiter; requests over the limit are answered with
429 and a ``Retry-After`` header instead of being queued.
"""

import math
import time
from typing import Callable, Dict

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .logging_middleware import get_client_ip
from .rate_limiter import UnifiedRateLimiter
from ..utils.logging_config import get_logger


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window limit of ``calls_per_minute`` per client address."""

    def __init__(self, app, calls_per_minute: int = 60, path_prefix: str = "/api"):
        super().__init__(app)
        self.calls_per_minute = calls_per_minute
        self.path_prefix = path_prefix
        self.logger = get_logger("api.rate_limit")
        self._limiters: Dict[str, UnifiedRateLimiter] = {}

    def _limiter_for(self, client_ip: str) -> UnifiedRateLimiter:
        limiter = self._limiters.get(client_ip)
        if limiter is None:
            limiter = UnifiedRateLimiter.for_client(self.calls_per_minute)
            self._limiters[client_ip] = limiter
        return limiter

    def _prune(self, now: float) -> None:
        # Forget clients idle for a full window
        idle = [
            ip for ip, limiter in self._limiters.items()
            if not limiter.request_times or limiter.request_times[-1] < now - 60
        ]
        for ip in idle:
            del self._limiters[ip]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        now = time.time()
        if len(self._limiters) > 1024:
            self._prune(now)

        client_ip = get_client_ip(request)
        limiter = self._limiter_for(client_ip)

        if not limiter.try_acquire(now):
            retry_after = max(1, math.ceil(limiter.retry_after(now)))
            self.logger.warning(
                "rate_limit_exceeded",
                client_ip=client_ip,
                path=request.url.path,
                retry_after=retry_after
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests, please try again later.",
                    "timestamp": now,
                    "path": str(request.url)
                },
                headers={"Retry-After": str(retry_after)}
            )

        return await call_next(request)
