import argparse
import sys
from typing import Optional

import requests

from toptracks.clients.auth import acquire_token
from toptracks.clients.spotify_client import SpotifyClient
from toptracks.config import load_credentials, load_environment
from toptracks.constants import DEFAULT_ARTIST_WORKERS, PLAYLIST_ID, get_logger, setup_logging
from toptracks.errors import TopTracksError
from toptracks.service import TopTracksService, write_report

logger = get_logger("cli")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Report the longest tracks of a Spotify playlist and their artists by follower count"
    )
    parser.add_argument("--env-file", default=".env", help="Path to .env file with credentials")
    parser.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_ARTIST_WORKERS,
        help="Number of artist lookups to run concurrently",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help="Abort if the playlist needs more than this many pages",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)
    if args.workers < 1:
        parser.error("--workers must be at least 1")
    if args.max_pages is not None and args.max_pages < 1:
        parser.error("--max-pages must be at least 1")
    return args


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)
    load_environment(args.env_file)

    try:
        credentials = load_credentials()
        with requests.Session() as session:
            token = acquire_token(credentials, session=session)
            client = SpotifyClient(token, session=session)
            service = TopTracksService(client, workers=args.workers, max_pages=args.max_pages)
            report = service.build_report(PLAYLIST_ID)
    except TopTracksError as e:
        print(f"Error initializing: {e}", file=sys.stderr)
        return 1

    playlist = report.playlist
    logger.info(
        f"Fetched {len(playlist.tracks)} tracks from {playlist.pages} page(s) "
        f"({playlist.skipped} skipped, {playlist.malformed} malformed)"
    )
    write_report(report, out=sys.stdout, err=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
