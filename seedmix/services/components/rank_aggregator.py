"""
Rank Aggregator

Weighted Borda count over the per-seed rankings. Each seed is reduced to a
local contribution and the contributions are merged by sum, so nothing is
shared while seeds are processed.

Within a seed of length L, the candidate at position i earns
``(L - i) * (1 + boost)``. The boost is the one computed in that seed's own
context. Ties on the summed score break on the best provider relevance
seen for the track, then on first-seen order (seeds in input order).
"""

from dataclasses import dataclass, field
from functools import reduce
from typing import Dict, List, Sequence

import structlog

from ...models.metadata_models import SeedRanking, Track

logger = structlog.get_logger(__name__)


@dataclass
class SeedContribution:
    """One seed's share of the aggregate score, keyed by track identity."""
    points: Dict[str, int] = field(default_factory=dict)
    match_scores: Dict[str, float] = field(default_factory=dict)
    tracks: Dict[str, Track] = field(default_factory=dict)

    @classmethod
    def from_ranking(cls, ranking: SeedRanking) -> "SeedContribution":
        contribution = cls()
        length = len(ranking.candidates)
        for position, candidate in enumerate(ranking.candidates):
            key = candidate.key
            if key in contribution.points:
                continue
            contribution.points[key] = (length - position) * candidate.weight
            contribution.match_scores[key] = candidate.match_score
            contribution.tracks[key] = candidate.track
        return contribution

    def merge(self, other: "SeedContribution") -> "SeedContribution":
        """Sum points, keep the best relevance, keep first-seen order."""
        points = dict(self.points)
        match_scores = dict(self.match_scores)
        tracks = dict(self.tracks)

        for key, value in other.points.items():
            points[key] = points.get(key, 0) + value
            match_scores[key] = max(match_scores.get(key, 0.0), other.match_scores[key])
            tracks.setdefault(key, other.tracks[key])

        return SeedContribution(points=points, match_scores=match_scores, tracks=tracks)


@dataclass
class AggregateScore:
    """Accumulated Borda scores plus the tie-break relevance per track."""
    scores: Dict[str, int] = field(default_factory=dict)
    match_scores: Dict[str, float] = field(default_factory=dict)
    tracks: Dict[str, Track] = field(default_factory=dict)

    def ranked_keys(self) -> List[str]:
        # sorted() is stable, dict order is first-seen order
        return sorted(
            self.scores,
            key=lambda key: (-self.scores[key], -self.match_scores.get(key, 0.0))
        )

    def ranked_tracks(self) -> List[Track]:
        return [self.tracks[key] for key in self.ranked_keys()]

    def __len__(self) -> int:
        return len(self.scores)


class RankAggregator:
    """Merges per-seed rankings into one global ranking."""

    def __init__(self):
        self.logger = logger.bind(component="RankAggregator")

    def aggregate(self, rankings: Sequence[SeedRanking]) -> AggregateScore:
        """
        Fold the non-empty rankings into an aggregate score.

        Args:
            rankings: Per-seed rankings, in seed input order

        Returns:
            AggregateScore (empty when no ranking has candidates)
        """
        contributions = [
            SeedContribution.from_ranking(ranking)
            for ranking in rankings
            if not ranking.is_empty()
        ]
        merged = reduce(SeedContribution.merge, contributions, SeedContribution())

        aggregate = AggregateScore(
            scores=merged.points,
            match_scores=merged.match_scores,
            tracks=merged.tracks
        )

        self.logger.debug(
            "Rankings aggregated",
            seeds_count=len(contributions),
            candidates_count=len(aggregate)
        )
        return aggregate

    def rank(self, rankings: Sequence[SeedRanking]) -> List[Track]:
        """Aggregate and return tracks best first."""
        return self.aggregate(rankings).ranked_tracks()
