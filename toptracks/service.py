from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, TextIO

from toptracks.clients.spotify_client import SpotifyClient
from toptracks.constants import DEFAULT_ARTIST_WORKERS, NULL_ARTIST_ID, TOP_TRACKS_LIMIT, get_logger
from toptracks.errors import FetchError
from toptracks.models import ArtistInfo, ArtistLookup, PlaylistFetch, TrackInfo

logger = get_logger("service")

ArtistFetcher = Callable[[str], ArtistInfo]


def top_tracks_by_duration(tracks: Iterable[TrackInfo], limit: int = TOP_TRACKS_LIMIT) -> list[TrackInfo]:
    """Longest tracks first; equal durations keep their playlist order."""
    return sorted(tracks, key=lambda track: track.duration_ms, reverse=True)[:limit]


def unique_artist_ids(tracks: Iterable[TrackInfo]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for track in tracks:
        for artist_id in track.artist_ids:
            if artist_id == NULL_ARTIST_ID or artist_id in seen:
                continue
            seen.add(artist_id)
            unique.append(artist_id)
    return unique


def _fetch_one(fetch: ArtistFetcher, artist_id: str) -> tuple[Optional[ArtistInfo], Optional[str]]:
    try:
        return fetch(artist_id), None
    except FetchError as e:
        logger.info(f"Artist {artist_id} skipped: {e}")
        return None, str(e)


def lookup_artists(
    artist_ids: Iterable[str],
    fetch: ArtistFetcher,
    workers: int = DEFAULT_ARTIST_WORKERS,
) -> ArtistLookup:
    """
    Fetch every artist, isolating failures.

    A failed fetch is recorded in ``failures`` and never stops the others.
    Both lists keep the order of ``artist_ids`` even when fetched concurrently.
    """
    artist_ids = list(artist_ids)
    if workers > 1 and len(artist_ids) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(lambda artist_id: _fetch_one(fetch, artist_id), artist_ids))
    else:
        results = [_fetch_one(fetch, artist_id) for artist_id in artist_ids]

    lookup = ArtistLookup()
    for artist_id, (artist, error) in zip(artist_ids, results):
        if artist is not None:
            lookup.artists.append(artist)
        else:
            lookup.failures.append((artist_id, error))
    return lookup


def artists_by_followers(artists: Iterable[ArtistInfo]) -> list[ArtistInfo]:
    return sorted(artists, key=lambda artist: artist.followers, reverse=True)


@dataclass
class Report:
    tracks: list[TrackInfo]
    artists: list[ArtistInfo]
    failures: list[tuple[str, str]] = field(default_factory=list)
    playlist: PlaylistFetch = field(default_factory=PlaylistFetch)

    @property
    def warnings(self) -> list[str]:
        return [message for _, message in self.failures]


class TopTracksService:
    def __init__(self, client: SpotifyClient, workers: int = DEFAULT_ARTIST_WORKERS, max_pages: Optional[int] = None):
        self.client = client
        self.workers = workers
        self.max_pages = max_pages

    def build_report(self, playlist_id: str) -> Report:
        playlist = self.client.fetch_all_tracks(playlist_id, max_pages=self.max_pages)
        top = top_tracks_by_duration(playlist.tracks)

        artist_ids = unique_artist_ids(top)
        logger.info(f"Looking up {len(artist_ids)} artist(s) from {len(top)} track(s)")
        lookup = lookup_artists(artist_ids, self.client.fetch_artist, workers=self.workers)

        return Report(
            tracks=top,
            artists=artists_by_followers(lookup.artists),
            failures=lookup.failures,
            playlist=playlist,
        )


def format_tracks(tracks: Iterable[TrackInfo]) -> list[str]:
    lines = [f"PART 1: Top {TOP_TRACKS_LIMIT} longest songs (SongName , duration_ms)", ""]
    lines.extend(f"{track.name} , {track.duration_ms}" for track in tracks)
    return lines


def format_artists(artists: Iterable[ArtistInfo]) -> list[str]:
    lines = ["", "PART 2: Artists ordered by follower count (Artist : follower_count)", ""]
    lines.extend(f"{artist.name} : {artist.followers}" for artist in artists)
    return lines


def format_warnings(warnings: list[str]) -> list[str]:
    if not warnings:
        return []
    return ["Warnings: some artist fetches failed:"] + [f" - {warning}" for warning in warnings]


def write_report(report: Report, out: TextIO, err: TextIO) -> None:
    """Write both reports to ``out``; artist warnings go to ``err``."""
    for line in format_tracks(report.tracks):
        print(line, file=out)
    for line in format_warnings(report.warnings):
        print(line, file=err)
    for line in format_artists(report.artists):
        print(line, file=out)
