"""
FastAPI Logging Middleware for SeedMix

Provides logging for all API requests and responses including:
- Request/response timing
- Status codes and error tracking
- Request IDs for tracing
- Slow request detection
"""

import time
import uuid
from typing import Callable, List, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..utils.logging_config import get_logger, log_api_request, set_request_context


def get_client_ip(request: Request) -> str:
    """
    Client address for logging and rate limiting.

    One trusted proxy hop: the first X-Forwarded-For entry wins.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all API requests and responses.

    Provides:
    - Request/response timing
    - Status code tracking
    - Error logging
    - Request ID generation for tracing (echoed as ``X-Request-ID``)
    """

    def __init__(self, app, exclude_paths: Optional[List[str]] = None):
        """
        Initialize logging middleware.

        Args:
            app: FastAPI application
            exclude_paths: List of paths to exclude from logging
        """
        super().__init__(app)
        self.logger = get_logger("api.middleware")
        self.exclude_paths = exclude_paths or ["/health", "/docs", "/openapi.json"]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and response with logging."""
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        client_ip = get_client_ip(request)

        set_request_context(request_id=request_id, client_ip=client_ip)

        start_time = time.time()

        self.logger.info(
            "api_request_start",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=client_ip
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            self.logger.error(
                "api_request_error",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                error_message=str(e),
                duration_seconds=round(duration, 4)
            )
            raise

        duration = time.time() - start_time

        self.logger.info(
            "api_request_complete",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_seconds=round(duration, 4),
            response_size=response.headers.get("content-length", "unknown")
        )

        log_api_request(
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            duration=duration,
            request_id=request_id
        )

        response.headers["X-Request-ID"] = request_id
        return response


class PerformanceLoggingMiddleware(BaseHTTPMiddleware):
    """Flags slow requests and records timings for the ranking endpoints."""

    TRACKED_ENDPOINTS = ("/api/recommend", "/api/find-tracks")

    def __init__(self, app, slow_request_threshold: float = 5.0):
        """
        Initialize performance logging middleware.

        Args:
            app: FastAPI application
            slow_request_threshold: Time in seconds to consider a request slow
        """
        super().__init__(app)
        self.logger = get_logger("performance")
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        if duration > self.slow_request_threshold:
            self.logger.warning(
                "slow_request",
                method=request.method,
                path=request.url.path,
                duration_seconds=round(duration, 4),
                threshold_seconds=self.slow_request_threshold
            )

        if request.url.path in self.TRACKED_ENDPOINTS:
            self.logger.info(
                "endpoint_performance",
                endpoint=request.url.path,
                method=request.method,
                duration_seconds=round(duration, 4),
                status_code=response.status_code
            )

        return response
