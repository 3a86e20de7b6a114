"""
Seed Resolver

Turns raw ``track_ids`` entries into autocorrected seeds.
"""

from typing import Any, List, Sequence, Tuple

import structlog

from ...models.metadata_models import Seed
from ..provider_gateway import ProviderGateway

logger = structlog.get_logger(__name__)


def extract_valid_seed_entries(track_ids: Sequence[Any]) -> List[Tuple[str, str]]:
    """
    Keep the well-formed entries of a ``track_ids`` list, in order.

    An entry is well-formed when it is an object whose ``title`` and
    ``artist`` are non-empty strings after trimming. Anything else is
    skipped silently.
    """
    entries = []
    for entry in track_ids:
        if not isinstance(entry, dict):
            continue
        title = entry.get("title")
        artist = entry.get("artist")
        if not isinstance(title, str) or not isinstance(artist, str):
            continue
        title, artist = title.strip(), artist.strip()
        if title and artist:
            entries.append((title, artist))
    return entries


class SeedResolver:
    """Autocorrects a (title, artist) pair through the provider's best-match search."""

    def __init__(self, gateway: ProviderGateway):
        self.gateway = gateway
        self.logger = logger.bind(component="SeedResolver")

    async def resolve(self, title: str, artist: str) -> Seed:
        """
        Resolve a raw pair into a seed.

        Never fails: when the provider has no match the seed keeps the
        original values.
        """
        match = await self.gateway.search_best_match(title, artist)
        if match is None:
            self.logger.debug("No correction for seed", title=title, artist=artist)
            return Seed.unresolved(title, artist)

        seed = Seed(
            original_title=title,
            original_artist=artist,
            resolved_title=match.title,
            resolved_artist=match.artist
        )
        if seed.was_corrected:
            self.logger.info(
                "Seed autocorrected",
                original=f"{artist} - {title}",
                resolved=f"{seed.resolved_artist} - {seed.resolved_title}"
            )
        return seed
