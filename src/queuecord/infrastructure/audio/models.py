"""Pydantic models for yt-dlp data transformation and configuration.

These are infrastructure-specific models for parsing external yt-dlp info
dicts and configuring yt-dlp options.
"""

from __future__ import annotations

import re
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from queuecord.domain.shared.types import NonEmptyStr, PositiveInt

DEFAULT_RETRIES: Final[int] = 3
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10
DEFAULT_HTTP_CHUNK_SIZE: Final[int] = 1024 * 1024  # 1 MiB
MAX_TITLE_LENGTH: Final[int] = 500
UNKNOWN_TITLE: Final[str] = "Unknown Title"

_HTTP_URL: Final[re.Pattern[str]] = re.compile(r"^https?://")
_UPLOAD_DATE: Final[re.Pattern[str]] = re.compile(r"^\d{8}$")


def _text_or_none(v: Any) -> str | None:
    if not isinstance(v, str) or not v.strip():
        return None
    return v


def _count_or_none(v: Any) -> int | None:
    if v is None or isinstance(v, bool):
        return None
    try:
        val = int(v)
    except (TypeError, ValueError):
        return None
    return val if val >= 0 else None


# ── Pydantic models for yt-dlp data ────────────────────────────────────


class YtDlpTrackInfo(BaseModel):
    """Trimmed yt-dlp extraction result for a single video.

    Extra fields from yt-dlp are silently ignored. Before-validators coerce
    garbage from external yt-dlp data gracefully.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr | None = None
    title: NonEmptyStr = UNKNOWN_TITLE
    fulltitle: NonEmptyStr | None = None
    webpage_url: NonEmptyStr | None = None
    original_url: NonEmptyStr | None = None
    url: NonEmptyStr | None = None
    thumbnail: NonEmptyStr | None = None
    description: str | None = None
    duration: int | None = None
    duration_string: NonEmptyStr | None = None
    view_count: int | None = None
    like_count: int | None = None
    age_limit: int = 0
    channel: NonEmptyStr | None = None
    channel_id: NonEmptyStr | None = None
    channel_url: NonEmptyStr | None = None
    uploader: NonEmptyStr | None = None
    uploader_id: NonEmptyStr | None = None
    uploader_url: NonEmptyStr | None = None
    upload_date: NonEmptyStr | None = None
    timestamp: int | None = None

    playlist: NonEmptyStr | None = None
    playlist_id: NonEmptyStr | None = None
    playlist_title: NonEmptyStr | None = None
    playlist_uploader: NonEmptyStr | None = None
    playlist_uploader_id: NonEmptyStr | None = None
    playlist_channel: NonEmptyStr | None = None
    playlist_channel_id: NonEmptyStr | None = None
    playlist_webpage_url: NonEmptyStr | None = None
    playlist_count: int | None = None

    @field_validator(
        "id", "fulltitle", "original_url", "url", "duration_string",
        "channel", "channel_id", "uploader", "uploader_id",
        "playlist", "playlist_id", "playlist_title", "playlist_uploader",
        "playlist_uploader_id", "playlist_channel", "playlist_channel_id",
        mode="before",
    )
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        """Convert empty / whitespace-only / non-string values to None."""
        return _text_or_none(v)

    @field_validator(
        "webpage_url", "thumbnail", "channel_url", "uploader_url", "playlist_webpage_url",
        mode="before",
    )
    @classmethod
    def _coerce_http_url(cls, v: Any) -> str | None:
        """Keep only http(s) URLs."""
        text = _text_or_none(v)
        if text is None or not _HTTP_URL.match(text):
            return None
        return text

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        """Fall back to default when yt-dlp sends empty or non-string title."""
        text = _text_or_none(v)
        if text is None:
            return UNKNOWN_TITLE
        return text[:MAX_TITLE_LENGTH]

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, v: Any) -> str | None:
        return v if isinstance(v, str) else None

    @field_validator(
        "duration", "view_count", "like_count", "timestamp", "playlist_count",
        mode="before",
    )
    @classmethod
    def _coerce_count(cls, v: Any) -> int | None:
        """Coerce to non-negative int; return None for garbage values."""
        return _count_or_none(v)

    @field_validator("age_limit", mode="before")
    @classmethod
    def _coerce_age_limit(cls, v: Any) -> int:
        return _count_or_none(v) or 0

    @field_validator("upload_date", mode="before")
    @classmethod
    def _coerce_upload_date(cls, v: Any) -> str | None:
        """Keep only YYYYMMDD dates."""
        text = _text_or_none(v)
        if text is None or not _UPLOAD_DATE.match(text):
            return None
        return text


class YtDlpPlaylistEntry(BaseModel):
    """A flat playlist entry (``extract_flat="in_playlist"``)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr | None = None
    url: NonEmptyStr | None = None
    webpage_url: NonEmptyStr | None = None
    title: NonEmptyStr | None = None

    @field_validator("id", "url", "webpage_url", "title", mode="before")
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        return _text_or_none(v)


class YtDlpPlaylistInfo(BaseModel):
    """Playlist-level fields of a flat yt-dlp playlist extraction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr | None = None
    title: NonEmptyStr | None = None
    uploader: NonEmptyStr | None = None
    uploader_id: NonEmptyStr | None = None
    channel: NonEmptyStr | None = None
    channel_id: NonEmptyStr | None = None
    webpage_url: NonEmptyStr | None = None
    entries: list[YtDlpPlaylistEntry] = Field(default_factory=list)

    @field_validator(
        "id", "title", "uploader", "uploader_id", "channel", "channel_id",
        mode="before",
    )
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        return _text_or_none(v)

    @field_validator("webpage_url", mode="before")
    @classmethod
    def _coerce_http_url(cls, v: Any) -> str | None:
        text = _text_or_none(v)
        if text is None or not _HTTP_URL.match(text):
            return None
        return text

    @field_validator("entries", mode="before")
    @classmethod
    def _drop_empty_entries(cls, v: Any) -> list[Any]:
        """yt-dlp yields None for unavailable entries, and may yield a generator."""
        if v is None or isinstance(v, (str, bytes, dict)):
            return []
        try:
            return [entry for entry in v if isinstance(entry, dict)]
        except TypeError:
            return []


# ── yt-dlp option models ───────────────────────────────────────────────


class YtDlpOpts(BaseModel):
    """Typed yt-dlp configuration options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    noprogress: bool = True
    no_warnings: bool = True
    noplaylist: bool = True
    forceipv4: bool = True
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT
    http_chunk_size: PositiveInt = DEFAULT_HTTP_CHUNK_SIZE
    format: NonEmptyStr | None = None
    skip_download: bool = True
    extract_flat: NonEmptyStr | bool = False
