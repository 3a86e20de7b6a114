"""
Track Search Service

Search by exactly one of title or artist, optionally keeping only tracks
tagged with a language.
"""

import asyncio
import math
from typing import Any, List, Optional

import structlog

from ..models.config_models import SystemConfig
from ..models.metadata_models import Track, normalize_name
from .components.seed_ranker import fetch_tags_bounded
from .exceptions import InvalidRequestError
from .provider_gateway import ProviderGateway

logger = structlog.get_logger(__name__)

EXACTLY_ONE_FIELD = "Provide exactly one of 'title' or 'artist'. Optional: 'language', 'limit'."


def normalize_output_limit(value: Any, default: int = 10, maximum: int = 50) -> int:
    """
    Coerce a client-supplied limit.

    Non-numeric, zero or missing values become ``default``; the result is
    clamped to ``[1, maximum]`` and truncated to an integer.
    """
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or number == 0:
        return default
    return int(max(1, min(maximum, number)))


def _present(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class TrackSearchService:
    """Title or artist search with an optional language-tag filter."""

    def __init__(self, gateway: ProviderGateway, system_config: Optional[SystemConfig] = None):
        self.gateway = gateway
        self.system_config = system_config or SystemConfig()
        self.logger = logger.bind(service="TrackSearchService")

    async def find_tracks(
        self,
        title: Any = None,
        artist: Any = None,
        language: Any = None,
        limit: Any = None
    ) -> List[Track]:
        """
        Find tracks by title or by artist.

        Args:
            title: Track title (exclusive with artist)
            artist: Artist name (exclusive with title)
            language: Optional language tag to filter on
            limit: Requested number of results

        Returns:
            Up to ``limit`` tracks; empty when nothing matched

        Raises:
            InvalidRequestError: Unless exactly one of title/artist is given
        """
        title = _present(title)
        artist = _present(artist)
        if (title is None) == (artist is None):
            raise InvalidRequestError(EXACTLY_ONE_FIELD)

        output_limit = normalize_output_limit(
            limit,
            default=self.system_config.output_limit_default,
            maximum=self.system_config.output_limit_max
        )

        if title is not None:
            candidates = await self.gateway.search_tracks(title, self.system_config.search_fetch_limit)
        else:
            candidates = await self._artist_top_tracks(artist)

        wanted = normalize_name(language) if isinstance(language, str) else ""
        if wanted:
            candidates = await self._filter_by_language(candidates, wanted)

        results = candidates[:output_limit]

        self.logger.info(
            "Track search completed",
            mode="title" if title is not None else "artist",
            language=wanted or None,
            results_count=len(results),
            limit=output_limit
        )
        return results

    async def _artist_top_tracks(self, artist: str) -> List[Track]:
        resolved = await self.gateway.resolve_artist(artist) or artist
        return await self.gateway.artist_top_tracks(
            resolved, self.system_config.artist_top_tracks_limit
        )

    async def _filter_by_language(self, candidates: List[Track], wanted: str) -> List[Track]:
        """
        Keep candidates tagged with the wanted language.

        Only the first ``tag_lookups_max`` candidates are inspected.
        """
        inspected = candidates[:self.system_config.tag_lookups_max]
        semaphore = asyncio.Semaphore(self.system_config.tag_lookup_concurrency)

        tag_sets = await asyncio.gather(*(
            fetch_tags_bounded(self.gateway, track.title, track.artist, semaphore)
            for track in inspected
        ))

        kept = [
            track for track, tags in zip(inspected, tag_sets)
            if wanted in {normalize_name(tag) for tag in tags}
        ]

        self.logger.debug(
            "Language filter applied",
            language=wanted,
            inspected=len(inspected),
            kept=len(kept)
        )
        return kept
