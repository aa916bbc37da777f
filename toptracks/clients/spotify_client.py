"""Spotify Web API access for playlist items and artists."""

import math
from typing import Any, Callable, Optional, TypeVar

import requests
import spotipy
from spotipy.exceptions import SpotifyException

from toptracks.constants import DEFAULT_HTTP_TIMEOUT_SEC, PAGE_SIZE, get_logger
from toptracks.errors import FetchError, PaginationLimitError
from toptracks.models import ArtistInfo, ArtistRef, ItemOutcome, ItemStatus, PlaylistFetch, TrackInfo

logger = get_logger("spotify")

T = TypeVar("T")


def _require_str(obj: dict, key: str) -> str:
    value = obj[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} is not a string")
    return value


def _require_count(value: Any, key: str) -> int:
    """Coerce a JSON number to a non-negative int."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key} is not a number")
    if not math.isfinite(value):
        raise ValueError(f"{key} is not finite")
    count = int(value)
    if count < 0:
        raise ValueError(f"{key} is negative")
    return count


def parse_track(track: dict) -> TrackInfo:
    if not isinstance(track, dict):
        raise TypeError("track is not an object")

    artists_raw = track["artists"]
    if not isinstance(artists_raw, list):
        raise TypeError("artists is not an array")

    artists = []
    for artist in artists_raw:
        if not isinstance(artist, dict):
            raise TypeError("artist is not an object")
        artists.append(ArtistRef(name=_require_str(artist, "name"), id=_require_str(artist, "id")))

    return TrackInfo(
        name=_require_str(track, "name"),
        duration_ms=_require_count(track["duration_ms"], "duration_ms"),
        artists=tuple(artists),
    )


def parse_item(item: Any) -> ItemOutcome:
    """Parse one playlist item. Removed and local tracks come back with a null track."""
    if not isinstance(item, dict):
        return ItemOutcome.malformed("item is not an object")

    track = item.get("track")
    if track is None:
        return ItemOutcome.skipped()

    try:
        return ItemOutcome.parsed(parse_track(track))
    except (KeyError, TypeError, ValueError) as e:
        return ItemOutcome.malformed(f"{type(e).__name__}: {e}")


def parse_artist(artist_id: str, payload: Any) -> ArtistInfo:
    try:
        if not isinstance(payload, dict):
            raise TypeError("body is not an object")
        followers = payload["followers"]
        if not isinstance(followers, dict):
            raise TypeError("followers is not an object")
        return ArtistInfo(
            id=artist_id,
            name=_require_str(payload, "name"),
            followers=_require_count(followers["total"], "followers.total"),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise FetchError(f"Failed to parse artist {artist_id}: {e}") from e


def _split_page(page: Any) -> tuple[list, Optional[str]]:
    """Return the items and next-page URL of a paging object."""
    if not isinstance(page, dict) or not isinstance(page.get("items"), list):
        raise FetchError("Malformed playlist page: no items array")

    next_url = page.get("next")
    if next_url is not None and not isinstance(next_url, str):
        raise FetchError(f"Malformed playlist page: next is {type(next_url).__name__}")
    return page["items"], next_url


class SpotifyClient:
    """Bearer-token Web API client for reading a playlist and its artists."""

    def __init__(
        self,
        token: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SEC,
        client: Optional[spotipy.Spotify] = None,
    ):
        # spotipy only mounts its retrying adapter on sessions it builds itself,
        # so a passed-in session keeps requests' default of no retries
        self.client = client or spotipy.Spotify(
            auth=token,
            requests_session=session or True,
            requests_timeout=timeout,
            retries=0,
            status_retries=0,
        )

    @staticmethod
    def _call(func: Callable[..., T], *args, **kwargs) -> T:
        try:
            return func(*args, **kwargs)
        except SpotifyException as e:
            # spotipy puts the request URL and the message on separate lines
            message = " ".join(str(e.msg).split())
            raise FetchError(f"HTTP {e.http_status}: {message}", status=e.http_status) from e
        except requests.RequestException as e:
            raise FetchError(f"Request failed: {e}") from e

    def fetch_all_tracks(self, playlist_id: str, max_pages: Optional[int] = None) -> PlaylistFetch:
        """
        Walk every page of a playlist and collect its tracks in order.

        Args:
            playlist_id: Spotify playlist ID
            max_pages: Stop with PaginationLimitError instead of fetching
                more than this many pages. None means unbounded.

        Raises:
            FetchError: If any page request fails or a page is unreadable.
        """
        result = PlaylistFetch()
        page = self._call(
            self.client.playlist_items, playlist_id, limit=PAGE_SIZE, additional_types=("track",)
        )

        while True:
            items, next_url = _split_page(page)
            result.pages += 1

            outcomes = [parse_item(item) for item in items]
            for outcome in outcomes:
                if outcome.status is ItemStatus.MALFORMED:
                    logger.debug(f"Dropping malformed item on page {result.pages}: {outcome.reason}")
            result.add(outcomes)
            logger.debug(f"Page {result.pages}: {len(items)} items")

            if next_url is None:
                break
            if max_pages is not None and result.pages >= max_pages:
                raise PaginationLimitError(max_pages)
            page = self._call(self.client.next, page)

        return result

    def fetch_artist(self, artist_id: str) -> ArtistInfo:
        payload = self._call(self.client.artist, artist_id)
        return parse_artist(artist_id, payload)
