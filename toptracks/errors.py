"""Error types raised by the report pipeline."""

from typing import Optional


class TopTracksError(Exception):
    """Base class for all report errors."""


class ConfigError(TopTracksError):
    """Required credentials are missing from the environment."""


class AuthError(TopTracksError):
    """The client-credentials token exchange failed."""


class FetchError(TopTracksError):
    """A Web API request failed or returned an unusable body."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class PaginationLimitError(FetchError):
    """The playlist kept paging past the configured page ceiling."""

    def __init__(self, max_pages: int):
        super().__init__(f"Pagination exceeded {max_pages} pages")
        self.max_pages = max_pages
