"""
Recommendation Metadata Models

Value objects shared by the provider gateway, the ranking components and the
HTTP layer. Tracks are immutable; identity is ``artist + DELIM + title`` exactly
as the provider returned them, with case folding applied only at comparison
time.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

# Separator used to build track identity keys
TRACK_KEY_DELIM = "|||"


def normalize_name(value: Optional[str]) -> str:
    """Trim and lower-case a name for case-insensitive comparison."""
    return (value or "").strip().lower()


def same_artist(first: Optional[str], second: Optional[str]) -> bool:
    """Case-insensitive artist comparison."""
    return normalize_name(first) == normalize_name(second)


def make_track_key(artist: str, title: str) -> str:
    """Build the identity key for a track."""
    return f"{artist}{TRACK_KEY_DELIM}{title}"


@dataclass(frozen=True)
class Track:
    """A track as the provider identifies it."""
    title: str
    artist: str

    @property
    def key(self) -> str:
        return make_track_key(self.artist, self.title)

    @classmethod
    def from_lastfm(cls, lastfm_track: "TrackMetadata") -> "Track":
        """
        Create a track from Last.fm TrackMetadata.

        Args:
            lastfm_track: LastFM TrackMetadata object

        Returns:
            Track instance
        """
        return cls(title=lastfm_track.name, artist=lastfm_track.artist)


@dataclass(frozen=True)
class CandidateTrack:
    """A track proposed for a seed, with the provider's relevance (0 if none)."""
    track: Track
    match_score: float = 0.0

    @property
    def key(self) -> str:
        return self.track.key

    @classmethod
    def from_lastfm(cls, lastfm_track: "TrackMetadata") -> "CandidateTrack":
        return cls(
            track=Track.from_lastfm(lastfm_track),
            match_score=lastfm_track.match or 0.0
        )


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate after preference scoring within one seed."""
    track: Track
    match_score: float = 0.0
    preference_boost: int = 0

    @property
    def key(self) -> str:
        return self.track.key

    @property
    def weight(self) -> int:
        """Borda weight contributed by listener preferences."""
        return 1 + self.preference_boost


@dataclass(frozen=True)
class Seed:
    """
    A caller-supplied track after autocorrection.

    When the provider offers no correction the resolved fields equal the
    original ones.
    """
    original_title: str
    original_artist: str
    resolved_title: str
    resolved_artist: str

    @classmethod
    def unresolved(cls, title: str, artist: str) -> "Seed":
        return cls(
            original_title=title,
            original_artist=artist,
            resolved_title=title,
            resolved_artist=artist
        )

    @property
    def track(self) -> Track:
        return Track(title=self.resolved_title, artist=self.resolved_artist)

    @property
    def key(self) -> str:
        return self.track.key

    @property
    def was_corrected(self) -> bool:
        return (
            self.resolved_title != self.original_title
            or self.resolved_artist != self.original_artist
        )


@dataclass
class SeedRanking:
    """Ordered candidates for one seed, best first."""
    seed: Seed
    candidates: List[ScoredCandidate] = field(default_factory=list)
    source: Optional[str] = None  # name of the candidate source that produced them

    def is_empty(self) -> bool:
        return not self.candidates

    def __len__(self) -> int:
        return len(self.candidates)


def _clean_names(values: Optional[Iterable[Any]]) -> Tuple[str, ...]:
    if not values:
        return ()
    names = (str(value).strip() for value in values if value is not None)
    return tuple(name for name in names if name)


@dataclass(frozen=True)
class Preferences:
    """Listener preferences. Read-only for the lifetime of a request."""
    favorite_artists: Tuple[str, ...] = ()
    preferred_genres: Tuple[str, ...] = ()
    preferred_languages: Tuple[str, ...] = ()
    same_artist_only: bool = False

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "Preferences":
        """
        Build preferences from a request payload.

        Missing or null lists become empty; the same-artist flag is coerced
        to a boolean.
        """
        payload = payload or {}
        return cls(
            favorite_artists=_clean_names(payload.get("favorite_artists")),
            preferred_genres=_clean_names(payload.get("preferred_genres")),
            preferred_languages=_clean_names(payload.get("preferred_languages")),
            same_artist_only=bool(payload.get("same_artist_only"))
        )

    def has_scoring_preferences(self) -> bool:
        return bool(
            self.favorite_artists
            or self.preferred_genres
            or self.preferred_languages
        )
