"""
System Configuration

Runtime configuration for the SeedMix service, loaded from the environment
(and an optional ``.env`` file) at startup.
"""

import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


class SystemConfig(BaseModel):
    """Overall service configuration"""

    # Provider
    lastfm_api_key: str = Field(default="", description="Last.fm API key")
    lastfm_base_url: str = Field(
        default="http://ws.audioscrobbler.com/2.0/",
        description="Last.fm web service root"
    )
    lastfm_rate_limit: Optional[float] = Field(
        default=None,
        description="Outbound Last.fm requests per second (unset = unpaced)"
    )
    request_timeout_seconds: int = Field(default=10, ge=1, description="Per-call provider timeout")
    provider_retries: int = Field(default=0, ge=0, description="Retries per provider call")

    # Recommendation ranking
    similar_limit: int = Field(default=100, ge=1, description="Similar/tag tracks fetched per seed")
    max_recommendations: int = Field(default=3, ge=1, description="Size of the final list")
    tag_lookup_concurrency: int = Field(default=25, ge=1, description="Concurrent tag lookups per request")

    # Track search
    search_fetch_limit: int = Field(default=30, ge=1, description="Raw results fetched for title search")
    artist_top_tracks_limit: int = Field(default=50, ge=1, description="Top tracks fetched for artist search")
    output_limit_max: int = Field(default=50, ge=1, description="Largest limit a client may ask for")
    output_limit_default: int = Field(default=10, ge=1, description="Limit used when none is given")
    tag_lookups_max: int = Field(default=25, ge=1, description="Candidates inspected by the language filter")

    # HTTP surface
    rate_limit_enabled: bool = Field(default=True, description="Enable inbound rate limiting")
    rate_limit_per_minute: int = Field(default=60, ge=1, description="Requests per client per minute")
    allow_origins: List[str] = Field(default_factory=lambda: ["*"], description="CORS origins")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    # Logging
    log_level: str = Field(default="INFO")
    log_dir: Optional[str] = Field(default=None, description="Directory for rotating log files")

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "SystemConfig":
        """
        Build configuration from environment variables.

        Args:
            env_file: Optional path to a dotenv file (defaults to ``.env`` lookup)

        Returns:
            Populated SystemConfig
        """
        load_dotenv(env_file)

        rate_limit = os.getenv("LASTFM_RATE_LIMIT")
        defaults = cls()

        return cls(
            lastfm_api_key=os.getenv("LASTFM_API_KEY", ""),
            lastfm_base_url=os.getenv("LASTFM_BASE_URL", defaults.lastfm_base_url),
            lastfm_rate_limit=float(rate_limit) if rate_limit else None,
            request_timeout_seconds=int(os.getenv("LASTFM_TIMEOUT_SECONDS", defaults.request_timeout_seconds)),
            provider_retries=int(os.getenv("LASTFM_RETRIES", defaults.provider_retries)),
            similar_limit=int(os.getenv("SIMILAR_LIMIT", defaults.similar_limit)),
            max_recommendations=int(os.getenv("MAX_RECOMMENDATIONS", defaults.max_recommendations)),
            tag_lookup_concurrency=int(os.getenv("TAG_LOOKUP_CONCURRENCY", defaults.tag_lookup_concurrency)),
            search_fetch_limit=int(os.getenv("SEARCH_FETCH_LIMIT", defaults.search_fetch_limit)),
            artist_top_tracks_limit=int(os.getenv("ARTIST_TOP_TRACKS_LIMIT", defaults.artist_top_tracks_limit)),
            output_limit_max=int(os.getenv("OUTPUT_LIMIT_MAX", defaults.output_limit_max)),
            tag_lookups_max=int(os.getenv("TAG_LOOKUPS_MAX", defaults.tag_lookups_max)),
            rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", defaults.rate_limit_enabled),
            rate_limit_per_minute=int(os.getenv("RATE_LIMIT_PER_MINUTE", defaults.rate_limit_per_minute)),
            allow_origins=_env_list("ALLOW_ORIGINS", defaults.allow_origins),
            host=os.getenv("HOST", defaults.host),
            port=int(os.getenv("PORT", defaults.port)),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level),
            log_dir=os.getenv("LOG_DIR") or None
        )
