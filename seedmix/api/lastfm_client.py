"""
Last.fm API Client

Provides access to Last.fm's music database for seed autocorrection,
candidate discovery (similar tracks, tag and chart top tracks) and tag
lookups. Every public method fails closed: errors are logged and turned
into an empty list or None.
"""

from typing import Dict, List, Optional, Any
from dataclasses import dataclass

import structlog

from .base_client import BaseAPIClient
from .rate_limiter import UnifiedRateLimiter

logger = structlog.get_logger(__name__)


@dataclass
class TrackMetadata:
    """Last.fm track metadata."""
    name: str
    artist: str
    mbid: Optional[str] = None
    url: Optional[str] = None
    match: float = 0.0
    tags: List[str] = None
    listeners: Optional[int] = None
    playcount: Optional[int] = None

    def __post_init__(self):
        if self.tags is None:
            self.tags = []


@dataclass
class ArtistMetadata:
    """Last.fm artist metadata."""
    name: str
    mbid: Optional[str] = None
    url: Optional[str] = None
    listeners: Optional[int] = None


def _as_list(value: Any) -> List[Any]:
    """Last.fm returns a bare object instead of a one-item list; normalize."""
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        return value
    return []


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class LastFmClient(BaseAPIClient):
    """
    Last.fm API client with unified rate limiting and error handling.

    Inherits from BaseAPIClient for consistent HTTP handling. Lookups ask
    Last.fm to autocorrect misspelled artist and track names.
    """

    BASE_URL = "http://ws.audioscrobbler.com/2.0/"

    def __init__(
        self,
        api_key: str,
        rate_limiter: Optional[UnifiedRateLimiter] = None,
        base_url: Optional[str] = None,
        timeout: int = 10,
        retries: int = 0
    ):
        """
        Initialize Last.fm client.

        Args:
            api_key: Last.fm API key (required)
            rate_limiter: Rate limiter instance (unpaced if not provided)
            base_url: Web service root (defaults to the public endpoint)
            timeout: Per-call timeout in seconds
            retries: Retry attempts per call
        """
        if rate_limiter is None:
            rate_limiter = UnifiedRateLimiter.for_lastfm()

        super().__init__(
            base_url=base_url or self.BASE_URL,
            rate_limiter=rate_limiter,
            timeout=timeout,
            retries=retries,
            service_name="LastFM"
        )

        self.api_key = api_key

        self.logger.info("Last.fm client initialized", timeout=timeout, retries=retries)

    def _extract_api_error(self, data: Dict[str, Any]) -> Optional[str]:
        """
        Extract Last.fm API error information from response data.

        Args:
            data: Parsed response data

        Returns:
            Error message if found, None otherwise
        """
        if "error" in data:
            return data.get("message", f"Error {data['error']}")
        return None

    async def _make_lastfm_request(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Make Last.fm API request with automatic parameter injection.

        Args:
            method: Last.fm API method
            params: Additional parameters

        Returns:
            API response data
        """
        request_params = {
            "method": method,
            "api_key": self.api_key,
            "format": "json",
            **(params or {})
        }

        # Last.fm uses the base URL with query params
        return await self._make_request(
            endpoint="",
            params=request_params,
            method="GET"
        )

    def _parse_track(self, track_data: Any, **log_context) -> Optional[TrackMetadata]:
        """
        Build TrackMetadata from one Last.fm track object.

        The artist is a plain string in search results and an object elsewhere.
        Items missing a name or artist are skipped.
        """
        if not isinstance(track_data, dict):
            return None

        artist_data = track_data.get("artist")
        if isinstance(artist_data, dict):
            artist_name = artist_data.get("name") or artist_data.get("#text") or ""
        else:
            artist_name = artist_data or ""

        track_name = track_data.get("name") or ""

        if not isinstance(track_name, str) or not isinstance(artist_name, str) \
                or not track_name or not artist_name:
            self.logger.debug(
                "Skipping track with missing name/artist",
                track=track_name,
                artist=artist_name,
                **log_context
            )
            return None

        return TrackMetadata(
            name=track_name,
            artist=artist_name,
            mbid=track_data.get("mbid") or None,
            url=track_data.get("url"),
            match=_to_float(track_data.get("match")),
            listeners=_to_int(track_data.get("listeners")),
            playcount=_to_int(track_data.get("playcount"))
        )

    def _parse_track_list(self, track_list: Any, **log_context) -> List[TrackMetadata]:
        tracks = []
        for track_data in _as_list(track_list):
            track = self._parse_track(track_data, **log_context)
            if track is not None:
                tracks.append(track)
        return tracks

    async def search_tracks(
        self,
        query: str,
        artist: Optional[str] = None,
        limit: int = 30,
        autocorrect: bool = True
    ) -> List[TrackMetadata]:
        """
        Search for tracks by title, optionally narrowed by artist.

        Args:
            query: Track title to search for
            artist: Artist name (optional)
            limit: Maximum results
            autocorrect: Ask Last.fm to correct misspellings

        Returns:
            List of track metadata in Last.fm relevance order
        """
        try:
            params = {"track": query, "limit": limit}
            if artist:
                params["artist"] = artist
            if autocorrect:
                params["autocorrect"] = 1

            data = await self._make_lastfm_request("track.search", params)

            results = data.get("results") or {}
            track_matches = results.get("trackmatches") or {}
            tracks = self._parse_track_list(track_matches.get("track"), query=query)

            self.logger.info(
                "Track search completed",
                query=query,
                artist=artist,
                results_count=len(tracks),
                limit=limit
            )

            return tracks

        except Exception as e:
            self.logger.error(
                "Track search failed",
                query=query,
                artist=artist,
                error=str(e)
            )
            return []

    async def get_similar_tracks(
        self,
        artist: str,
        track: str,
        limit: int = 100
    ) -> List[TrackMetadata]:
        """
        Get tracks similar to a seed track.

        Args:
            artist: Artist name
            track: Track name
            limit: Maximum results

        Returns:
            Similar tracks with their Last.fm match value in [0, 1]
        """
        try:
            data = await self._make_lastfm_request(
                "track.getSimilar",
                {
                    "artist": artist,
                    "track": track,
                    "limit": limit,
                    "autocorrect": 1
                }
            )

            similar = data.get("similartracks") or {}
            tracks = self._parse_track_list(
                similar.get("track"),
                seed_artist=artist,
                seed_track=track
            )

            self.logger.info(
                "Similar tracks search completed",
                seed_artist=artist,
                seed_track=track,
                results_count=len(tracks)
            )

            return tracks

        except Exception as e:
            self.logger.error(
                "Similar tracks search failed",
                artist=artist,
                track=track,
                error=str(e)
            )
            return []

    async def get_track_top_tags(self, artist: str, track: str) -> List[str]:
        """
        Get a track's top tags, best first, lower-cased.

        Args:
            artist: Artist name
            track: Track name

        Returns:
            Tag names (empty if the track is unknown or the call fails)
        """
        try:
            data = await self._make_lastfm_request(
                "track.getTopTags",
                {"artist": artist, "track": track, "autocorrect": 1}
            )

            top_tags = data.get("toptags") or {}
            tags = []
            for tag_data in _as_list(top_tags.get("tag")):
                name = tag_data.get("name") if isinstance(tag_data, dict) else None
                if isinstance(name, str) and name.strip():
                    tags.append(name.strip().lower())

            self.logger.debug(
                "Track tags retrieved",
                artist=artist,
                track=track,
                tags_count=len(tags)
            )

            return tags

        except Exception as e:
            self.logger.error(
                "Get track tags failed",
                artist=artist,
                track=track,
                error=str(e)
            )
            return []

    async def get_tag_top_tracks(self, tag: str, limit: int = 100) -> List[TrackMetadata]:
        """
        Get the most popular tracks for a tag.

        Args:
            tag: Tag name (e.g., "shoegaze")
            limit: Maximum results

        Returns:
            List of track metadata
        """
        try:
            data = await self._make_lastfm_request(
                "tag.getTopTracks",
                {"tag": tag, "limit": limit}
            )

            tracks_data = data.get("tracks") or {}
            tracks = self._parse_track_list(tracks_data.get("track"), tag=tag)

            self.logger.info(
                "Tag top tracks retrieved",
                tag=tag,
                results_count=len(tracks)
            )

            return tracks

        except Exception as e:
            self.logger.error(
                "Get tag top tracks failed",
                tag=tag,
                error=str(e)
            )
            return []

    async def get_artist_top_tracks(self, artist: str, limit: int = 1) -> List[TrackMetadata]:
        """
        Get an artist's top tracks.

        Args:
            artist: Artist name
            limit: Maximum number of tracks

        Returns:
            List of top tracks, most popular first
        """
        try:
            data = await self._make_lastfm_request(
                "artist.getTopTracks",
                {"artist": artist, "limit": limit, "autocorrect": 1}
            )

            top_tracks = data.get("toptracks") or {}
            tracks = self._parse_track_list(top_tracks.get("track"), top_tracks_of=artist)

            self.logger.info(
                "Artist top tracks retrieved",
                artist=artist,
                tracks_count=len(tracks)
            )

            return tracks[:limit]

        except Exception as e:
            self.logger.error(
                "Get artist top tracks failed",
                artist=artist,
                error=str(e)
            )
            return []

    async def search_artists(self, query: str, limit: int = 1) -> List[ArtistMetadata]:
        """
        Search for artists by name.

        Args:
            query: Artist name to search for
            limit: Maximum results

        Returns:
            Matching artists, best first
        """
        try:
            data = await self._make_lastfm_request(
                "artist.search",
                {"artist": query, "limit": limit}
            )

            results = data.get("results") or {}
            matches = results.get("artistmatches") or {}

            artists = []
            for artist_data in _as_list(matches.get("artist")):
                if not isinstance(artist_data, dict) or not artist_data.get("name"):
                    continue
                artists.append(ArtistMetadata(
                    name=artist_data["name"],
                    mbid=artist_data.get("mbid") or None,
                    url=artist_data.get("url"),
                    listeners=_to_int(artist_data.get("listeners"))
                ))

            self.logger.info(
                "Artist search completed",
                query=query,
                results_count=len(artists)
            )

            return artists

        except Exception as e:
            self.logger.error(
                "Artist search failed",
                query=query,
                error=str(e)
            )
            return []

    async def get_chart_top_tracks(self, limit: int = 1) -> List[TrackMetadata]:
        """
        Get the global Last.fm chart.

        Args:
            limit: Maximum results

        Returns:
            Chart tracks, most popular first
        """
        try:
            data = await self._make_lastfm_request(
                "chart.getTopTracks",
                {"limit": limit}
            )

            tracks_data = data.get("tracks") or {}
            tracks = self._parse_track_list(tracks_data.get("track"))

            self.logger.info("Chart top tracks retrieved", results_count=len(tracks))

            return tracks[:limit]

        except Exception as e:
            self.logger.error("Get chart top tracks failed", error=str(e))
            return []
