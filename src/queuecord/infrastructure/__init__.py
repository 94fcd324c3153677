"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Audio (yt-dlp metadata provider)
- Discord (voice sink streaming through FFmpeg)
"""

from queuecord.infrastructure.audio.ytdlp_provider import YtDlpMetadataProvider
from queuecord.infrastructure.discord.voice_sink import DiscordVoiceSink

__all__ = [
    "DiscordVoiceSink",
    "YtDlpMetadataProvider",
]
