from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional


@dataclass(frozen=True)
class ArtistRef:
    """Artist reference embedded in a playlist track."""

    name: str
    id: str


@dataclass(frozen=True)
class TrackInfo:
    name: str
    duration_ms: int
    artists: tuple[ArtistRef, ...] = ()

    @property
    def artist_ids(self) -> list[str]:
        return [artist.id for artist in self.artists]


@dataclass(frozen=True)
class ArtistInfo:
    id: str
    name: str
    followers: int


@dataclass(frozen=True)
class Credentials:
    client_id: str
    client_secret: str = field(repr=False)


class ItemStatus(Enum):
    PARSED = "parsed"
    SKIPPED = "skipped"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ItemOutcome:
    """Result of parsing a single playlist item."""

    status: ItemStatus
    track: Optional[TrackInfo] = None
    reason: str = ""

    @classmethod
    def parsed(cls, track: TrackInfo) -> "ItemOutcome":
        return cls(ItemStatus.PARSED, track=track)

    @classmethod
    def skipped(cls) -> "ItemOutcome":
        return cls(ItemStatus.SKIPPED)

    @classmethod
    def malformed(cls, reason: str) -> "ItemOutcome":
        return cls(ItemStatus.MALFORMED, reason=reason)


@dataclass
class PlaylistFetch:
    """Tracks collected by walking every page of a playlist."""

    tracks: list[TrackInfo] = field(default_factory=list)
    pages: int = 0
    skipped: int = 0
    malformed: int = 0

    def add(self, outcomes: Iterable[ItemOutcome]) -> None:
        for outcome in outcomes:
            if outcome.status is ItemStatus.PARSED:
                self.tracks.append(outcome.track)
            elif outcome.status is ItemStatus.SKIPPED:
                self.skipped += 1
            else:
                self.malformed += 1


@dataclass
class ArtistLookup:
    """Artist fetches split into successes and failures, both in request order."""

    artists: list[ArtistInfo] = field(default_factory=list)
    failures: list[tuple[str, str]] = field(default_factory=list)
