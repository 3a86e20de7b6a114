"""
Tests for RecommendationService.

Drives the whole ranking engine against the in-memory gateway:
- Seed validation and autocorrection
- Fallback tier precedence
- Preference scoring and weighted Borda aggregation
- Same-artist mode and the global fallback
"""

import asyncio

import pytest

from seedmix.models.config_models import SystemConfig
from seedmix.models.metadata_models import Preferences, Track
from seedmix.services.exceptions import InvalidRequestError, NoRecommendationsError
from seedmix.services.recommendation_service import RecommendationService

from conftest import FakeProviderGateway


@pytest.fixture
def service(gateway, system_config):
    """Create a RecommendationService over the fake gateway."""
    return RecommendationService(gateway, system_config)


def titles(result):
    return [track.title for track in result.tracks]


class TestRequestValidation:
    """Test rejection and skipping of bad seed input."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("track_ids", [[], None, "A", {"title": "A", "artist": "X"}])
    async def test_missing_or_empty_track_ids_rejected(self, service, gateway, track_ids):
        """A missing, empty or non-list track_ids is rejected before any provider call."""
        with pytest.raises(InvalidRequestError) as exc_info:
            await service.recommend(track_ids)

        assert exc_info.value.message == "track_ids (non-empty array) is required"
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_malformed_entries_are_skipped(self, service, gateway):
        """Entries missing a title or artist are ignored when a valid seed produces candidates."""
        gateway.set_similar("A", "X", [("T1", "Y", 0.9)])

        result = await service.recommend([
            {"title": "A"},
            "not an object",
            {"title": "", "artist": "X"},
            {"title": "A", "artist": "X"}
        ])

        assert titles(result) == ["T1"]
        assert gateway.count("search_best_match") == 1

    @pytest.mark.asyncio
    async def test_only_malformed_entries_use_global_fallback(self, service, gateway):
        """With no usable seed at all, the chart fallback still answers."""
        gateway.set_chart([("Chart Hit", "Star")])

        result = await service.recommend([{"artist": "X"}])

        assert result.tracks == [Track(title="Chart Hit", artist="Star")]
        assert result.strategy == "global_fallback"


class TestSeedResolution:
    """Test autocorrection of seeds."""

    @pytest.mark.asyncio
    async def test_corrected_seed_drives_lookups(self, service, gateway):
        """Candidate lookups use the autocorrected title and artist."""
        gateway.set_correction("creep", "radiohed", "Creep", "Radiohead")
        gateway.set_similar("Creep", "Radiohead", [("Karma Police", "Radiohead", 1.0)])

        result = await service.recommend([{"title": "creep", "artist": "radiohed"}])

        assert titles(result) == ["Karma Police"]
        assert ("similar_tracks", "Creep", "Radiohead", 100) in gateway.calls

    @pytest.mark.asyncio
    async def test_uncorrected_seed_keeps_original_values(self, service, gateway):
        """Without a provider match the original pair is used."""
        gateway.set_similar("A", "X", [("T1", "Y", 0.5)])

        result = await service.recommend([{"title": "A", "artist": "X"}])

        assert titles(result) == ["T1"]


class TestFallbackTiers:
    """Test the per-seed fallback chain as seen through the service."""

    @pytest.mark.asyncio
    async def test_similar_tracks_suppress_lower_tiers(self, service, gateway):
        """Tag and artist fallbacks never run when similar tracks exist."""
        gateway.set_similar("A", "X", [("T1", "Y", 0.9)])
        gateway.set_tags("A", "X", ["rock"])
        gateway.set_tag_tracks("rock", [("R1", "Z")])
        gateway.set_artist_tracks("X", [("Hit", "X")])

        result = await service.recommend([{"title": "A", "artist": "X"}])

        assert titles(result) == ["T1"]
        assert gateway.count("top_tag") == 0
        assert gateway.count("tag_top_tracks") == 0
        assert gateway.count("artist_top_track") == 0

    @pytest.mark.asyncio
    async def test_tag_tier_used_before_artist_tier(self, service, gateway):
        """With no similar tracks, the seed's top tag supplies candidates."""
        gateway.set_tags("A", "X", ["shoegaze", "dream pop"])
        gateway.set_tag_tracks("shoegaze", [("Only Shallow", "My Bloody Valentine"), ("Alison", "Slowdive")])
        gateway.set_artist_tracks("X", [("Hit", "X")])

        result = await service.recommend([{"title": "A", "artist": "X"}])

        assert titles(result) == ["Only Shallow", "Alison"]
        assert gateway.count("artist_top_track") == 0
        assert ("tag_top_tracks", "shoegaze", 100) in gateway.calls

    @pytest.mark.asyncio
    async def test_artist_tier_is_last_resort(self, service, gateway):
        """Without similar tracks or tags, the seed artist's top track is used."""
        gateway.set_artist_tracks("X", [("Hit", "X"), ("Other", "X")])

        result = await service.recommend([{"title": "A", "artist": "X"}])

        assert result.tracks == [Track(title="Hit", artist="X")]
        assert result.sources == ["artist_top_track"]

    @pytest.mark.asyncio
    async def test_tag_with_empty_chart_skips_artist_tier(self, service, gateway):
        """A tagged seed whose tag chart is empty stays empty; the chart fallback applies."""
        gateway.set_tags("A", "X", ["obscuretag"])
        gateway.set_artist_tracks("X", [("Hit", "X")])
        gateway.set_chart([("Chart Hit", "Star")])

        result = await service.recommend([{"title": "A", "artist": "X"}])

        assert result.tracks == [Track(title="Chart Hit", artist="Star")]
        assert result.strategy == "global_fallback"
        assert result.sources == ["tag_top_tracks"]
        assert ("tag_top_tracks", "obscuretag", 100) in gateway.calls
        assert gateway.count("artist_top_track") == 0


class TestRankingAndPreferences:
    """Test preference boosts and weighted Borda aggregation."""

    @pytest.mark.asyncio
    async def test_genre_preference_reorders_single_seed(self, service, gateway):
        """Tracks tagged with a preferred genre rank above untagged ones."""
        gateway.set_similar("A", "X", [
            ("T1", "X", 0.9),
            ("T2", "Y", 0.8),
            ("T3", "Z", 0.7),
            ("T4", "W", 0.6)
        ])
        gateway.set_tags("T1", "X", ["pop"])
        gateway.set_tags("T3", "Z", ["Pop", "dance"])

        result = await service.recommend(
            [{"title": "A", "artist": "X"}],
            Preferences(preferred_genres=("pop",))
        )

        assert titles(result) == ["T1", "T3", "T2"]

    @pytest.mark.asyncio
    async def test_favorite_artist_moves_candidate_up(self, service, gateway):
        """Adding a favorite artist strictly improves that candidate's position."""
        gateway.set_similar("A", "X", [("P", "Y", 0.5), ("Q", "Z", 0.5)])

        plain = await service.recommend([{"title": "A", "artist": "X"}])
        boosted = await service.recommend(
            [{"title": "A", "artist": "X"}],
            Preferences(favorite_artists=("z",))
        )

        assert titles(plain) == ["P", "Q"]
        assert titles(boosted) == ["Q", "P"]

    @pytest.mark.asyncio
    async def test_no_tag_lookups_without_tag_preferences(self, service, gateway):
        """Tags are only fetched when a genre or language preference exists."""
        gateway.set_similar("A", "X", [("P", "Y", 0.5), ("Q", "Z", 0.4)])

        await service.recommend(
            [{"title": "A", "artist": "X"}],
            Preferences(favorite_artists=("Y",))
        )

        assert gateway.count("top_tags") == 0

    @pytest.mark.asyncio
    async def test_scores_add_up_across_seeds(self, service, gateway):
        """A candidate proposed by two seeds can outrank each seed's own favorite."""
        gateway.set_similar("A", "X", [("Shared", "C", 0.9), ("Solo1", "S", 0.5)])
        gateway.set_similar("B", "Y", [("Solo2", "T", 0.9), ("Shared", "C", 0.8)])

        result = await service.recommend([
            {"title": "A", "artist": "X"},
            {"title": "B", "artist": "Y"}
        ])

        # Shared: 2 + 1 = 3, Solo2: 2, Solo1: 1
        assert titles(result) == ["Shared", "Solo2", "Solo1"]

    @pytest.mark.asyncio
    async def test_equal_scores_break_on_best_relevance(self, service, gateway):
        """Ties on aggregate score go to the higher provider relevance."""
        gateway.set_similar("A", "X", [("P", "Y", 0.2), ("Q", "Z", 0.1)])
        gateway.set_similar("B", "W", [("Q", "Z", 0.95), ("P", "Y", 0.3)])

        result = await service.recommend([
            {"title": "A", "artist": "X"},
            {"title": "B", "artist": "W"}
        ])

        assert titles(result) == ["Q", "P"]

    @pytest.mark.asyncio
    async def test_output_capped_at_three(self, service, gateway):
        """No more than three tracks are ever returned."""
        gateway.set_similar("A", "X", [(f"T{i}", "Y", 1.0 - i / 10) for i in range(6)])

        result = await service.recommend([{"title": "A", "artist": "X"}])

        assert titles(result) == ["T0", "T1", "T2"]

    @pytest.mark.asyncio
    async def test_duplicate_candidates_within_seed_counted_once(self, service, gateway):
        """Repeated provider items collapse to their first occurrence."""
        gateway.set_similar("A", "X", [("T1", "Y", 0.9), ("T2", "Z", 0.8), ("T1", "Y", 0.1)])

        result = await service.recommend([{"title": "A", "artist": "X"}])

        assert titles(result) == ["T1", "T2"]

    @pytest.mark.asyncio
    async def test_tag_lookups_are_bounded(self, gateway):
        """Concurrent tag lookups never exceed the configured cap."""
        in_flight = 0
        peak = 0

        class SlowTagGateway(FakeProviderGateway):
            async def top_tags(self, title, artist):
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return ["pop"]

        slow = SlowTagGateway()
        slow.set_similar("A", "X", [(f"T{i}", "Y", 0.5) for i in range(8)])
        slow.set_similar("B", "Z", [(f"U{i}", "W", 0.5) for i in range(8)])
        config = SystemConfig(tag_lookup_concurrency=3)

        await RecommendationService(slow, config).recommend(
            [{"title": "A", "artist": "X"}, {"title": "B", "artist": "Z"}],
            Preferences(preferred_genres=("pop",))
        )

        assert 0 < peak <= 3


class TestGlobalFallback:
    """Test the chart fallback and exhaustion."""

    @pytest.mark.asyncio
    async def test_global_fallback_returns_exactly_one_track(self, service, gateway):
        """When no seed yields candidates, exactly one chart track is returned."""
        gateway.set_chart([("Chart 1", "A1"), ("Chart 2", "A2")])

        result = await service.recommend([{"title": "A", "artist": "X"}])

        assert result.tracks == [Track(title="Chart 1", artist="A1")]
        assert result.strategy == "global_fallback"

    @pytest.mark.asyncio
    async def test_global_fallback_not_used_when_any_seed_produces(self, service, gateway):
        """One productive seed is enough to skip the chart."""
        gateway.set_similar("B", "Y", [("T1", "Z", 0.4)])
        gateway.set_chart([("Chart 1", "A1")])

        result = await service.recommend([
            {"title": "A", "artist": "X"},
            {"title": "B", "artist": "Y"}
        ])

        assert titles(result) == ["T1"]
        assert gateway.count("global_top_track") == 0

    @pytest.mark.asyncio
    async def test_exhaustion_raises_not_found(self, service, gateway):
        """Nothing anywhere is a not-found error, never an empty success."""
        with pytest.raises(NoRecommendationsError) as exc_info:
            await service.recommend([{"title": "A", "artist": "X"}])

        assert exc_info.value.message == "No recommendations available."


class TestSameArtistMode:
    """Test same_artist_only preferences."""

    @pytest.mark.asyncio
    async def test_similar_tracks_filtered_to_seed_artist(self, service, gateway):
        """Only tracks by the seed artist (any case) survive."""
        gateway.set_similar("A", "X", [("T1", "X", 0.9), ("T2", "Y", 0.8), ("T3", "x", 0.7)])

        result = await service.recommend(
            [{"title": "A", "artist": "X"}],
            Preferences(same_artist_only=True)
        )

        assert result.tracks == [Track(title="T1", artist="X"), Track(title="T3", artist="x")]

    @pytest.mark.asyncio
    async def test_filtered_out_similar_falls_back_to_artist_top_track(self, service, gateway):
        """An emptied similar list goes straight to the artist tier, skipping tags."""
        gateway.set_similar("A", "X", [("T2", "Y", 0.8)])
        gateway.set_tags("A", "X", ["rock"])
        gateway.set_tag_tracks("rock", [("R1", "X")])
        gateway.set_artist_tracks("X", [("Hit", "X")])

        result = await service.recommend(
            [{"title": "A", "artist": "X"}],
            Preferences(same_artist_only=True)
        )

        assert result.tracks == [Track(title="Hit", artist="X")]
        assert gateway.count("top_tag") == 0

    @pytest.mark.asyncio
    async def test_every_result_matches_a_seed_artist(self, service, gateway):
        """With several seeds, results come only from the seed artists."""
        gateway.set_similar("A", "X", [("T1", "X", 0.9), ("Other", "Q", 0.99)])
        gateway.set_similar("B", "Y", [("T2", "y", 0.5)])

        result = await service.recommend(
            [{"title": "A", "artist": "X"}, {"title": "B", "artist": "Y"}],
            Preferences(same_artist_only=True)
        )

        assert {track.artist.lower() for track in result.tracks} <= {"x", "y"}
        assert {track.title for track in result.tracks} == {"T1", "T2"}

    @pytest.mark.asyncio
    async def test_same_artist_exhaustion_does_not_use_chart(self, service, gateway):
        """Same-artist mode never falls back to the global chart."""
        gateway.set_chart([("Chart 1", "A1")])

        with pytest.raises(NoRecommendationsError) as exc_info:
            await service.recommend(
                [{"title": "A", "artist": "X"}],
                Preferences(same_artist_only=True)
            )

        assert exc_info.value.message == "No same-artist recommendations available."
        assert gateway.count("global_top_track") == 0
