"""
FastAPI Backend for SeedMix

REST endpoints for seed-based recommendations and track search, wired to a
provider gateway that is opened on startup and closed on shutdown.
"""

import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..models.config_models import SystemConfig
from ..models.request_models import (
    FindTracksRequest,
    FindTracksResponse,
    HealthResponse,
    RecommendRequest,
    RecommendResponse,
    TrackPayload
)
from ..services.exceptions import InvalidRequestError, SeedMixError
from ..services.provider_gateway import LastFmGateway, ProviderGateway
from ..services.recommendation_service import RecommendationService, TRACK_IDS_REQUIRED
from ..services.track_search_service import TrackSearchService, EXACTLY_ONE_FIELD
from ..utils.logging_config import get_logger, log_error, setup_logging
from .logging_middleware import LoggingMiddleware, PerformanceLoggingMiddleware
from .rate_limit_middleware import RateLimitMiddleware

logger = get_logger(__name__)

INVALID_PREFERENCES = (
    "preferences must be an object with favorite_artists, preferred_genres "
    "and preferred_languages lists and a same_artist_only flag"
)


async def _read_json_object(request: Request) -> Dict[str, Any]:
    """Request body as a dict; invalid JSON or a non-object body reads as empty."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _error_response(status_code: int, message: str, request: Request, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "timestamp": time.time(),
            "path": str(request.url)
        },
        headers=headers
    )


def create_app(
    system_config: Optional[SystemConfig] = None,
    gateway: Optional[ProviderGateway] = None
) -> FastAPI:
    """
    Build the SeedMix application.

    Args:
        system_config: Configuration (defaults to the environment)
        gateway: Provider gateway to use instead of Last.fm (tests inject one)

    Returns:
        Configured FastAPI application
    """
    config = system_config or SystemConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup and shutdown."""
        setup_logging(log_dir=config.log_dir, log_level=config.log_level)
        startup_logger = get_logger(__name__)

        startup_logger.info("Initializing SeedMix recommendation service...")

        # Raises when no API key is configured; the app must not start without one
        provider = gateway or LastFmGateway.from_config(config)
        await provider.start()

        app.state.gateway = provider
        app.state.recommendation_service = RecommendationService(provider, config)
        app.state.track_search_service = TrackSearchService(provider, config)

        startup_logger.info(
            "SeedMix service initialized",
            gateway=type(provider).__name__,
            rate_limit_enabled=config.rate_limit_enabled
        )

        try:
            yield
        finally:
            startup_logger.info("Shutting down SeedMix service...")
            await provider.close()
            app.state.recommendation_service = None
            app.state.track_search_service = None

    app = FastAPI(
        title="SeedMix API",
        description="Seed-based track recommendations with weighted rank aggregation",
        version=__version__,
        lifespan=lifespan
    )
    app.state.config = config
    app.state.gateway = None
    app.state.recommendation_service = None
    app.state.track_search_service = None

    # Added first, so it runs inside CORS and logging
    if config.rate_limit_enabled:
        app.add_middleware(RateLimitMiddleware, calls_per_minute=config.rate_limit_per_minute)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"])
    app.add_middleware(PerformanceLoggingMiddleware, slow_request_threshold=5.0)

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Health check endpoint."""
        state = request.app.state
        return HealthResponse(
            status="healthy",
            timestamp=time.time(),
            version=__version__,
            components={
                "recommendation_service": (
                    "active" if state.recommendation_service else "inactive"
                ),
                "provider_gateway": state.gateway.get_status() if state.gateway else "inactive"
            }
        )

    @app.post("/api/recommend", response_model=RecommendResponse)
    async def recommend(request: Request):
        """
        Recommend up to three tracks for a list of seed tracks.

        Malformed seed entries are skipped. Responds 400 when ``track_ids``
        is missing or empty and 404 when no fallback produced anything.
        """
        body = await _read_json_object(request)

        try:
            payload = RecommendRequest.model_validate(body)
        except ValidationError as e:
            if any(error["loc"][:1] == ("track_ids",) for error in e.errors()):
                raise InvalidRequestError(TRACK_IDS_REQUIRED)
            raise InvalidRequestError(INVALID_PREFERENCES)

        result = await request.app.state.recommendation_service.recommend(
            payload.track_ids,
            payload.preferences.to_preferences()
        )

        return RecommendResponse(
            recommended_tracks=[TrackPayload.from_track(track) for track in result.tracks]
        )

    @app.post("/api/find-tracks", response_model=FindTracksResponse)
    async def find_tracks(request: Request):
        """Search by exactly one of title or artist, optionally filtered by language."""
        body = await _read_json_object(request)

        try:
            payload = FindTracksRequest.model_validate(body)
        except ValidationError:
            raise InvalidRequestError(EXACTLY_ONE_FIELD)

        tracks = await request.app.state.track_search_service.find_tracks(
            title=payload.title,
            artist=payload.artist,
            language=payload.language,
            limit=payload.limit
        )

        return FindTracksResponse(results=[TrackPayload.from_track(track) for track in tracks])

    # Error handlers
    @app.exception_handler(SeedMixError)
    async def seedmix_exception_handler(request: Request, exc: SeedMixError):
        """Validation and exhaustion errors raised by the services."""
        logger.info(
            "Request rejected",
            error_type=type(exc).__name__,
            status_code=exc.status_code,
            message=exc.message,
            path=request.url.path
        )
        return _error_response(exc.status_code, exc.message, request)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Custom HTTP exception handler."""
        return _error_response(exc.status_code, exc.detail, request, headers=exc.headers)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """General exception handler for unexpected errors."""
        log_error(exc, {"path": request.url.path, "method": request.method})
        return _error_response(500, "Internal server error", request)

    return app
