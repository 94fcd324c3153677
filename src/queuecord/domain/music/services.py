"""
Music Domain Services

Stateless logic that does not belong on a single record: elapsed-time
derivation, locator classification, playlist backfill and shuffling.
"""

from __future__ import annotations

import random
from collections.abc import MutableSequence
from datetime import datetime
from typing import Final, TypeVar
from urllib.parse import parse_qs, urlparse

from queuecord.domain.music.entities import PlaylistRecord, TrackRecord
from queuecord.domain.music.value_objects import LocatorKind
from queuecord.domain.shared.datetime_utils import format_mm_ss, seconds_since
from queuecord.domain.shared.messages import ErrorMessages

T = TypeVar("T")

URL_SCHEMES: Final[frozenset[str]] = frozenset({"http", "https"})
PLAYLIST_QUERY_PARAM: Final[str] = "list"


def elapsed_seconds(track: TrackRecord, now: datetime | None = None) -> int | None:
    """Seconds since *track* started playing, or None if it never started."""
    if track.started_at is None:
        return None
    return seconds_since(track.started_at, now)


def format_elapsed(track: TrackRecord, now: datetime | None = None) -> str:
    """Elapsed playback time as ``mm:ss`` (``00:00`` if never started)."""
    return format_mm_ss(elapsed_seconds(track, now) or 0)


def normalize_url(locator: str) -> str | None:
    """Return *locator* as an http(s) URL, or None if it is not one."""
    candidate = locator.strip()
    if candidate.startswith("www."):
        candidate = f"https://{candidate}"

    parsed = urlparse(candidate)
    if parsed.scheme in URL_SCHEMES and parsed.netloc:
        return candidate
    return None


def classify_locator(locator: str) -> LocatorKind:
    """Decide whether *locator* is a playlist URL, a plain URL or a search term.

    A playlist URL is any URL carrying a ``list`` query parameter.
    """
    if not locator or not locator.strip():
        raise ValueError(ErrorMessages.EMPTY_LOCATOR)

    url = normalize_url(locator)
    if url is None:
        return LocatorKind.SEARCH

    if PLAYLIST_QUERY_PARAM in parse_qs(urlparse(url).query):
        return LocatorKind.PLAYLIST
    return LocatorKind.URL


def backfill_playlist_fields(track: TrackRecord, playlist: PlaylistRecord) -> TrackRecord:
    """Fill playlist-membership fields the member metadata did not provide.

    Fields already present on *track* are left alone.
    """
    fallback = {
        "playlist": playlist.title,
        "playlist_id": playlist.id,
        "playlist_title": playlist.title,
        "playlist_uploader": playlist.uploader,
        "playlist_uploader_id": playlist.uploader_id,
        "playlist_channel": playlist.channel,
        "playlist_channel_id": playlist.channel_id,
        "playlist_webpage_url": playlist.webpage_url,
        "playlist_count": playlist.track_count,
    }
    update = {
        field: value
        for field, value in fallback.items()
        if value is not None and getattr(track, field) is None
    }
    if not update:
        return track
    return track.model_copy(update=update)


def fisher_yates_shuffle(items: MutableSequence[T], rng: random.Random | None = None) -> None:
    """Shuffle *items* in place with a uniform random permutation.

    For i from the last index down to 1, swap item i with a uniformly chosen
    index in [0, i].
    """
    rng = rng or random.Random()
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
