from unittest.mock import Mock

import pytest
import requests
from spotipy.exceptions import SpotifyException

from toptracks.clients.spotify_client import SpotifyClient, parse_item
from toptracks.errors import FetchError, PaginationLimitError
from toptracks.models import ArtistRef, ItemStatus


def track_item(name, duration_ms, artists=(("Artist", "a1"),)):
    return {
        "added_at": "2024-01-01T00:00:00Z",
        "track": {
            "name": name,
            "duration_ms": duration_ms,
            "artists": [{"name": artist_name, "id": artist_id} for artist_name, artist_id in artists],
        },
    }


def page(items, next_url=None):
    return {"items": items, "next": next_url, "limit": 100}


def make_client(pages):
    api = Mock()
    api.playlist_items.return_value = pages[0]
    api.next.side_effect = list(pages[1:])
    return SpotifyClient("token", client=api), api


# --- item parsing ---

def test_parse_item_builds_track():
    outcome = parse_item(track_item("Song", 215000, artists=(("A", "id-a"), ("B", "id-b"))))

    assert outcome.status is ItemStatus.PARSED
    assert outcome.track.name == "Song"
    assert outcome.track.duration_ms == 215000
    assert outcome.track.artists == (ArtistRef("A", "id-a"), ArtistRef("B", "id-b"))


def test_parse_item_coerces_float_duration():
    outcome = parse_item(track_item("Song", 215000.0))
    assert outcome.track.duration_ms == 215000
    assert isinstance(outcome.track.duration_ms, int)


@pytest.mark.parametrize("item", [{"track": None}, {"added_at": "2024-01-01T00:00:00Z"}])
def test_null_or_absent_track_is_skipped(item):
    assert parse_item(item).status is ItemStatus.SKIPPED


@pytest.mark.parametrize(
    "track",
    [
        {"duration_ms": 1000, "artists": []},
        {"name": "x", "artists": []},
        {"name": "x", "duration_ms": 1000},
        {"name": "x", "duration_ms": "1000", "artists": []},
        {"name": "x", "duration_ms": True, "artists": []},
        {"name": "x", "duration_ms": -5, "artists": []},
        {"name": "x", "duration_ms": float("inf"), "artists": []},
        {"name": "x", "duration_ms": float("nan"), "artists": []},
        {"name": "x", "duration_ms": 1000, "artists": [{"name": "local", "id": None}]},
        {"name": "x", "duration_ms": 1000, "artists": "nobody"},
        "not-an-object",
    ],
)
def test_malformed_track_reported(track):
    outcome = parse_item({"track": track})
    assert outcome.status is ItemStatus.MALFORMED
    assert outcome.track is None
    assert outcome.reason


# --- pagination ---

def test_single_page_when_next_is_null():
    client, api = make_client([page([track_item("One", 1000)])])

    result = client.fetch_all_tracks("playlist")

    assert result.pages == 1
    assert [t.name for t in result.tracks] == ["One"]
    api.playlist_items.assert_called_once_with("playlist", limit=100, additional_types=("track",))
    api.next.assert_not_called()


def test_single_page_when_next_is_absent():
    client, api = make_client([{"items": [track_item("One", 1000)]}])

    result = client.fetch_all_tracks("playlist")

    assert result.pages == 1
    api.next.assert_not_called()


def test_pages_followed_in_order():
    first = page([track_item("A", 1), track_item("B", 2)], next_url="https://api.spotify.com/v1/next?offset=100")
    second = page([track_item("C", 3)], next_url="https://api.spotify.com/v1/next?offset=200")
    third = page([track_item("D", 4)])
    client, api = make_client([first, second, third])

    result = client.fetch_all_tracks("playlist")

    assert [t.name for t in result.tracks] == ["A", "B", "C", "D"]
    assert result.pages == 3
    assert [call.args[0] for call in api.next.call_args_list] == [first, second]


def test_null_and_malformed_items_dropped_siblings_kept():
    items = [
        track_item("Keep 1", 100),
        {"track": None},
        {"track": {"name": "Broken", "artists": []}},
        track_item("Keep 2", 200),
    ]
    client, _ = make_client([page(items)])

    result = client.fetch_all_tracks("playlist")

    assert [t.name for t in result.tracks] == ["Keep 1", "Keep 2"]
    assert result.skipped == 1
    assert result.malformed == 1


def test_http_error_on_later_page_aborts():
    client, api = make_client([page([track_item("A", 1)], next_url="https://next")])
    api.next.side_effect = SpotifyException(502, -1, "Bad gateway")

    with pytest.raises(FetchError) as excinfo:
        client.fetch_all_tracks("playlist")
    assert excinfo.value.status == 502
    assert "HTTP 502" in str(excinfo.value)


def test_transport_error_aborts():
    api = Mock()
    api.playlist_items.side_effect = requests.ConnectionError("connection reset")
    client = SpotifyClient("token", client=api)

    with pytest.raises(FetchError, match="Request failed: connection reset"):
        client.fetch_all_tracks("playlist")


@pytest.mark.parametrize("body", [None, {"next": None}, {"items": "nope"}, {"items": [], "next": 5}])
def test_unreadable_page_aborts(body):
    client, _ = make_client([body])

    with pytest.raises(FetchError):
        client.fetch_all_tracks("playlist")


def test_page_ceiling_stops_runaway_pagination():
    looping = page([track_item("Again", 1)], next_url="https://api.spotify.com/v1/same")
    api = Mock()
    api.playlist_items.return_value = looping
    api.next.return_value = looping
    client = SpotifyClient("token", client=api)

    with pytest.raises(PaginationLimitError) as excinfo:
        client.fetch_all_tracks("playlist", max_pages=3)
    assert excinfo.value.max_pages == 3
    assert api.next.call_count == 2


def test_page_ceiling_not_hit_when_pages_fit():
    client, _ = make_client([page([track_item("A", 1)], next_url="https://next"), page([track_item("B", 2)])])

    result = client.fetch_all_tracks("playlist", max_pages=2)

    assert result.pages == 2


# --- artists ---

def test_fetch_artist_parses_followers():
    api = Mock()
    api.artist.return_value = {"id": "a1", "name": "Band", "followers": {"href": None, "total": 1234}}
    client = SpotifyClient("token", client=api)

    artist = client.fetch_artist("a1")

    assert (artist.id, artist.name, artist.followers) == ("a1", "Band", 1234)
    api.artist.assert_called_once_with("a1")


def test_fetch_artist_http_error():
    api = Mock()
    api.artist.side_effect = SpotifyException(404, -1, "non existing id")
    client = SpotifyClient("token", client=api)

    with pytest.raises(FetchError, match="HTTP 404: non existing id"):
        client.fetch_artist("missing")


@pytest.mark.parametrize("body", [{"name": "Band"}, {"name": "Band", "followers": {}}, {"followers": {"total": 1}}, None])
def test_fetch_artist_parse_error_names_id(body):
    api = Mock()
    api.artist.return_value = body
    client = SpotifyClient("token", client=api)

    with pytest.raises(FetchError, match="Failed to parse artist a9"):
        client.fetch_artist("a9")


def test_non_finite_duration_dropped_without_aborting_page():
    items = [track_item("Infinite", float("inf")), track_item("Finite", 1000)]
    client, _ = make_client([page(items)])

    result = client.fetch_all_tracks("playlist")

    assert [t.name for t in result.tracks] == ["Finite"]
    assert result.malformed == 1


def test_fetch_artist_non_finite_followers_is_fetch_error():
    api = Mock()
    api.artist.return_value = {"name": "Band", "followers": {"total": float("inf")}}
    client = SpotifyClient("token", client=api)

    with pytest.raises(FetchError, match="Failed to parse artist a1"):
        client.fetch_artist("a1")
