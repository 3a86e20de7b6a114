"""
HTTP Request/Response Models

Pydantic schemas for the recommendation and track search endpoints.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .metadata_models import Preferences, Track


class PreferencesPayload(BaseModel):
    """Optional listener preferences attached to a recommendation request."""
    favorite_artists: List[str] = Field(default_factory=list)
    preferred_genres: List[str] = Field(default_factory=list)
    preferred_languages: List[str] = Field(default_factory=list)
    same_artist_only: bool = False

    @field_validator("favorite_artists", "preferred_genres", "preferred_languages", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("same_artist_only", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return bool(value)

    def to_preferences(self) -> Preferences:
        return Preferences.from_payload(self.model_dump())


class RecommendRequest(BaseModel):
    """
    Request model for seed-based recommendations.

    Entries of ``track_ids`` are kept as raw values; malformed entries are
    skipped by the recommendation service rather than rejected here.
    """
    track_ids: List[Any] = Field(..., min_length=1, description="Seed tracks as {title, artist}")
    preferences: PreferencesPayload = Field(default_factory=PreferencesPayload)

    @field_validator("preferences", mode="before")
    @classmethod
    def _default_preferences(cls, value: Any) -> Any:
        return {} if value is None else value


class TrackPayload(BaseModel):
    title: str
    artist: str

    @classmethod
    def from_track(cls, track: Track) -> "TrackPayload":
        return cls(title=track.title, artist=track.artist)


class RecommendResponse(BaseModel):
    recommended_tracks: List[TrackPayload] = Field(default_factory=list)


class FindTracksRequest(BaseModel):
    """Search by exactly one of title or artist, optionally filtered by language tag."""
    title: Optional[str] = None
    artist: Optional[str] = None
    language: Optional[str] = None
    limit: Any = None


class FindTracksResponse(BaseModel):
    results: List[TrackPayload] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: float
    version: str
    components: Dict[str, str]
