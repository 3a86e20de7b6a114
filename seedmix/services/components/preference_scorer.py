"""
Preference Scorer

Additive boost for a candidate given listener preferences and the
candidate's descriptive tags.
"""

from typing import Iterable

from ...models.metadata_models import Preferences, Track, normalize_name

FAVORITE_ARTIST_BOOST = 5
GENRE_BOOST = 3
LANGUAGE_BOOST = 2


class PreferenceScorer:
    """
    Scores candidates against one request's preferences.

    Preference names and tags compare case-insensitively. Scoring is pure;
    tag lookups happen before it is called.
    """

    def __init__(self, preferences: Preferences):
        self.preferences = preferences
        self._artists = {normalize_name(a) for a in preferences.favorite_artists}
        self._genres = {normalize_name(g) for g in preferences.preferred_genres}
        self._languages = {normalize_name(l) for l in preferences.preferred_languages}
        self._artists.discard("")
        self._genres.discard("")
        self._languages.discard("")

    @property
    def needs_tags(self) -> bool:
        """Whether any rule looks at tags; when not, tag lookups can be skipped."""
        return bool(self._genres or self._languages)

    def score(self, track: Track, tags: Iterable[str] = ()) -> int:
        """
        Compute the boost for a track.

        Args:
            track: Candidate track
            tags: The track's descriptive tags

        Returns:
            +5 for a favorite artist, +3 for a preferred genre tag and +2 for
            a preferred language tag, summed
        """
        tag_set = {normalize_name(tag) for tag in tags}

        boost = 0
        if normalize_name(track.artist) in self._artists:
            boost += FAVORITE_ARTIST_BOOST
        if self._genres & tag_set:
            boost += GENRE_BOOST
        if self._languages & tag_set:
            boost += LANGUAGE_BOOST
        return boost
