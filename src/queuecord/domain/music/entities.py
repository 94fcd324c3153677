"""Core domain entities for the music bounded context."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from queuecord.domain.shared.exceptions import NotAvailableError
from queuecord.domain.shared.messages import ErrorMessages
from queuecord.domain.shared.types import (
    DurationSeconds,
    HistoryCapacity,
    HttpUrlStr,
    NonEmptyStr,
    NonNegativeInt,
    TrackTitleStr,
    UploadDateStr,
    UtcDatetimeField,
)


class TrackRecord(BaseModel):
    """Immutable metadata snapshot of a streamable track.

    ``started_at`` is the only runtime field; the queue engine sets it by
    replacing the queued record with a copy when playback starts.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    PLAYLIST_FIELDS: ClassVar[tuple[str, ...]] = (
        "playlist",
        "playlist_id",
        "playlist_title",
        "playlist_uploader",
        "playlist_uploader_id",
        "playlist_channel",
        "playlist_channel_id",
        "playlist_webpage_url",
        "playlist_count",
    )

    id: NonEmptyStr
    title: TrackTitleStr
    webpage_url: HttpUrlStr
    original_url: NonEmptyStr | None = None
    fulltitle: NonEmptyStr | None = None
    thumbnail: HttpUrlStr | None = None
    description: str | None = None
    duration: DurationSeconds | None = None
    duration_string: NonEmptyStr | None = None
    view_count: NonNegativeInt | None = None
    like_count: NonNegativeInt | None = None
    age_limit: NonNegativeInt = 0

    # Channel / uploader
    channel: NonEmptyStr | None = None
    channel_id: NonEmptyStr | None = None
    channel_url: HttpUrlStr | None = None
    uploader: NonEmptyStr | None = None
    uploader_id: NonEmptyStr | None = None
    uploader_url: HttpUrlStr | None = None
    upload_date: UploadDateStr | None = None
    timestamp: NonNegativeInt | None = None

    # Playlist membership
    playlist: NonEmptyStr | None = None
    playlist_id: NonEmptyStr | None = None
    playlist_title: NonEmptyStr | None = None
    playlist_uploader: NonEmptyStr | None = None
    playlist_uploader_id: NonEmptyStr | None = None
    playlist_channel: NonEmptyStr | None = None
    playlist_channel_id: NonEmptyStr | None = None
    playlist_webpage_url: HttpUrlStr | None = None
    playlist_count: NonNegativeInt | None = None

    # Playback metadata (engine-owned)
    started_at: UtcDatetimeField | None = None


class TrackStub(BaseModel):
    """Flat playlist entry: enough to fetch full metadata later."""

    model_config = ConfigDict(frozen=True)

    id: NonEmptyStr
    url: NonEmptyStr
    title: NonEmptyStr | None = None


class PlaylistRecord(BaseModel):
    """Playlist-level metadata plus its member stubs in provider order."""

    model_config = ConfigDict(frozen=True)

    id: NonEmptyStr
    title: NonEmptyStr | None = None
    uploader: NonEmptyStr | None = None
    uploader_id: NonEmptyStr | None = None
    channel: NonEmptyStr | None = None
    channel_id: NonEmptyStr | None = None
    webpage_url: HttpUrlStr | None = None
    tracks: list[TrackStub] = Field(default_factory=list)

    @property
    def track_count(self) -> int:
        return len(self.tracks)


class TrackHistory:
    """Bounded record of completed tracks.

    Eviction is purely insertion-ordered: once ``capacity`` is exceeded the
    oldest entry is dropped.
    """

    DEFAULT_CAPACITY: ClassVar[int] = 10

    def __init__(self, capacity: HistoryCapacity = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self._capacity = capacity
        self._entries: deque[TrackRecord] = deque()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __iter__(self) -> Iterator[TrackRecord]:
        return iter(self._entries)

    def push(self, track: TrackRecord) -> TrackRecord | None:
        """Append a track and return the evicted entry, if any."""
        self._entries.append(track)
        if len(self._entries) > self._capacity:
            return self._entries.popleft()
        return None

    def pop(self) -> TrackRecord:
        """Remove and return the most recently pushed track."""
        if not self._entries:
            raise NotAvailableError("previous track", ErrorMessages.HISTORY_EMPTY)
        return self._entries.pop()

    def snapshot(self) -> tuple[TrackRecord, ...]:
        """Oldest first."""
        return tuple(self._entries)
