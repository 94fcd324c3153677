"""Audio infrastructure - yt-dlp metadata provider."""

from queuecord.infrastructure.audio.models import (
    YtDlpOpts,
    YtDlpPlaylistEntry,
    YtDlpPlaylistInfo,
    YtDlpTrackInfo,
)
from queuecord.infrastructure.audio.ytdlp_provider import YtDlpMetadataProvider

__all__ = [
    "YtDlpMetadataProvider",
    "YtDlpOpts",
    "YtDlpPlaylistEntry",
    "YtDlpPlaylistInfo",
    "YtDlpTrackInfo",
]
