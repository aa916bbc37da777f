"""Constants and configuration for the playlist report."""

import logging
import sys

# --- Spotify endpoints ---
TOKEN_URL = "https://accounts.spotify.com/api/token"
API_BASE_URL = "https://api.spotify.com/v1"

# --- Playlist ---
PLAYLIST_ID = "5Rrf7mqN8uus2AaQQQNdc1"
PAGE_SIZE = 100
TOP_TRACKS_LIMIT = 10

# Spotify sometimes reports missing artist ids as the string "null"
NULL_ARTIST_ID = "null"

# --- Credentials ---
CLIENT_ID_VAR = "SPOTIFY_CLIENT_ID"
CLIENT_SECRET_VAR = "SPOTIFY_CLIENT_SECRET"

# --- HTTP ---
DEFAULT_HTTP_TIMEOUT_SEC = 5

# --- Parallelism ---
DEFAULT_ARTIST_WORKERS = 1

# --- Logging ---
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    logger = logging.getLogger("toptracks")
    logger.setLevel(level)

    # spotipy logs every failed request at ERROR; those failures are
    # reported once through FetchError instead
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("spotipy").setLevel(logging.DEBUG if verbose else logging.CRITICAL)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module."""
    return logging.getLogger(f"toptracks.{name}")
