"""Discord infrastructure - voice sink."""

from queuecord.infrastructure.discord.voice_sink import DiscordVoiceSink

__all__ = ["DiscordVoiceSink"]
