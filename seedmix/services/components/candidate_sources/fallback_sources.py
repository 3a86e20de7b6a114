"""
Fallback Sources

Lower tiers of the fallback chain, used when the seed has no similar tracks:
the top tracks of the seed's best tag, then the seed artist's top track.
Both carry no provider relevance.
"""

from typing import List

from ....models.metadata_models import CandidateTrack, Seed
from ...provider_gateway import ProviderGateway
from .base_source import BaseCandidateSource, TierOutcome


class TagTopTracksSource(BaseCandidateSource):
    """
    Top tracks of the seed's single best descriptive tag.

    Once the seed has a tag this tier settles the seed, even if the tag's
    chart is empty; the artist tier is only for seeds without tags.
    """

    name = "tag_top_tracks"

    def __init__(self, gateway: ProviderGateway, limit: int = 100):
        super().__init__(gateway)
        self.limit = limit

    async def generate(self, seed: Seed) -> List[CandidateTrack]:
        return (await self.outcome(seed)).candidates

    async def outcome(self, seed: Seed) -> TierOutcome:
        tag = await self.gateway.top_tag(seed.resolved_title, seed.resolved_artist)
        if not tag:
            self.logger.debug("Seed has no tags", seed=seed.key)
            return TierOutcome()

        candidates = await self.gateway.tag_top_tracks(tag, self.limit)
        # Tag charts carry no similarity
        candidates = [CandidateTrack(track=candidate.track) for candidate in candidates]

        self.logger.debug(
            "Tag top tracks fetched",
            seed=seed.key,
            tag=tag,
            candidates_count=len(candidates)
        )
        return TierOutcome(candidates=candidates, settled=True)


class ArtistTopTrackSource(BaseCandidateSource):
    """The seed artist's single most popular track."""

    name = "artist_top_track"

    async def generate(self, seed: Seed) -> List[CandidateTrack]:
        track = await self.gateway.artist_top_track(seed.resolved_artist)
        if track is None:
            self.logger.debug("Artist has no top track", artist=seed.resolved_artist)
            return []
        return [CandidateTrack(track=track)]
