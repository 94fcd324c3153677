"""MetadataProvider implementation using yt-dlp for URL extraction and search."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Final, cast

from yt_dlp import YoutubeDL
from yt_dlp.utils import YoutubeDLError

from queuecord.application.interfaces.metadata_provider import MetadataProvider
from queuecord.config.settings import AudioSettings
from queuecord.domain.music.entities import PlaylistRecord, TrackRecord, TrackStub
from queuecord.domain.music.services import normalize_url
from queuecord.domain.shared.exceptions import ProviderError
from queuecord.domain.shared.messages import ErrorMessages, LogTemplates
from queuecord.infrastructure.audio.models import (
    YtDlpOpts,
    YtDlpPlaylistEntry,
    YtDlpPlaylistInfo,
    YtDlpTrackInfo,
)

logger = logging.getLogger(__name__)

LOG_URL_TRUNCATE: Final[int] = 60


class YtDlpMetadataProvider(MetadataProvider):
    """Metadata provider backed by yt-dlp extraction and search."""

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts(
            format=self._settings.ytdlp_format,
            socket_timeout=self._settings.socket_timeout,
        )

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def _get_playlist_opts(self) -> YtDlpOpts:
        return self._get_opts(noplaylist=False, extract_flat="in_playlist")

    # ── Sync extraction (run in a worker thread) ────────────────────

    def _extract_sync(self, query: str, opts: YtDlpOpts) -> dict[str, Any]:
        try:
            with YoutubeDL(params=cast(Any, opts.model_dump())) as ydl:
                data = ydl.extract_info(query, download=False)
        except YoutubeDLError as exc:
            logger.warning(LogTemplates.YTDLP_FAILED_EXTRACT, query[:LOG_URL_TRUNCATE])
            raise ProviderError(
                query, ErrorMessages.PROVIDER_EXTRACT_FAILED.format(locator=query, error=exc)
            ) from exc

        if not isinstance(data, dict):
            raise ProviderError(query, ErrorMessages.PROVIDER_NO_RESULT.format(locator=query))
        return dict(data)

    def _fetch_sync(self, locator: str) -> YtDlpTrackInfo:
        url = normalize_url(locator)
        if url is not None:
            logger.debug(LogTemplates.YTDLP_FETCHING, url[:LOG_URL_TRUNCATE])
            return YtDlpTrackInfo.model_validate(self._extract_sync(url, self._get_opts()))

        logger.debug(LogTemplates.YTDLP_SEARCHING, locator)
        search_query = f"{self._settings.search_prefix}1:{locator}"
        data = self._extract_sync(search_query, self._get_opts())

        entries = data.get("entries")
        first = next((e for e in entries or [] if isinstance(e, dict)), None)
        if first is None:
            raise ProviderError(locator, ErrorMessages.PROVIDER_NO_RESULT.format(locator=locator))
        return YtDlpTrackInfo.model_validate(first)

    def _fetch_playlist_sync(self, url: str) -> YtDlpPlaylistInfo:
        logger.debug(LogTemplates.YTDLP_PLAYLIST_FETCHING, url[:LOG_URL_TRUNCATE])
        data = self._extract_sync(url, self._get_playlist_opts())
        if data.get("_type") not in (None, "playlist") or "entries" not in data:
            raise ProviderError(url, ErrorMessages.NOT_A_PLAYLIST.format(url=url))
        return YtDlpPlaylistInfo.model_validate(data)

    # ── Conversion ──────────────────────────────────────────────────

    def _info_to_record(self, info: YtDlpTrackInfo, locator: str) -> TrackRecord:
        webpage_url = info.webpage_url or self._watch_url(info.id)
        if info.id is None or webpage_url is None:
            raise ProviderError(locator, ErrorMessages.PROVIDER_NO_RESULT.format(locator=locator))

        fields = info.model_dump(exclude={"url", "webpage_url"})
        return TrackRecord(**fields, webpage_url=webpage_url)

    def _entry_to_stub(self, entry: YtDlpPlaylistEntry) -> TrackStub | None:
        url = normalize_url(entry.webpage_url or entry.url or "") or self._watch_url(entry.id)
        if entry.id is None or url is None:
            return None
        return TrackStub(id=entry.id, url=url, title=entry.title)

    def _watch_url(self, video_id: str | None) -> str | None:
        if not video_id:
            return None
        return self._settings.watch_url_template.format(id=video_id)

    # ── MetadataProvider ────────────────────────────────────────────

    async def fetch_metadata(self, locator: str) -> TrackRecord:
        info = await asyncio.to_thread(self._fetch_sync, locator)
        return self._info_to_record(info, locator)

    async def fetch_playlist(self, url: str) -> PlaylistRecord:
        info = await asyncio.to_thread(self._fetch_playlist_sync, url)
        stubs = [stub for entry in info.entries if (stub := self._entry_to_stub(entry)) is not None]

        return PlaylistRecord(
            id=info.id or url,
            title=info.title,
            uploader=info.uploader,
            uploader_id=info.uploader_id,
            channel=info.channel,
            channel_id=info.channel_id,
            webpage_url=info.webpage_url or normalize_url(url),
            tracks=stubs,
        )
