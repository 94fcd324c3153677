"""Discord voice sink implementing AudioSink on top of a discord.py VoiceClient.

Audio is piped from a ``yt-dlp`` subprocess into FFmpeg, so no stream URL has
to be resolved ahead of playback.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
from collections.abc import Awaitable
from typing import Final, TypeVar

import discord

from queuecord.application.interfaces.audio_sink import AudioSink, StatusCallback
from queuecord.config.settings import AudioSettings
from queuecord.domain.music.value_objects import SinkStatus
from queuecord.domain.shared.exceptions import SinkError
from queuecord.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONNECT_TIMEOUT: Final[float] = 10.0
PROCESS_WAIT_TIMEOUT: Final[float] = 1.0


class DiscordVoiceSink(AudioSink):
    """One voice connection and at most one yt-dlp/FFmpeg stream at a time."""

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._callback: StatusCallback | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

        self._process: subprocess.Popen[bytes] | None = None
        self._source: discord.AudioSource | None = None
        # Bumped for every new stream and handed out as its stream token;
        # end-of-stream callbacks from older streams are dropped.
        self._generation = 0

    def set_status_callback(self, callback: StatusCallback) -> None:
        self._callback = callback

    # ── Connection ──────────────────────────────────────────────────

    async def open(self, target: discord.abc.Connectable) -> discord.VoiceClient:
        if not isinstance(target, discord.VoiceChannel | discord.StageChannel):
            raise SinkError(ErrorMessages.SINK_TARGET_NOT_VOICE, operation="open")

        self._loop = asyncio.get_running_loop()

        vc = target.guild.voice_client
        if isinstance(vc, discord.VoiceClient) and vc.is_connected():
            if vc.channel is not None and vc.channel.id != target.id:
                await self._guarded(vc.move_to(target), "open")
                logger.info(LogTemplates.VOICE_CONNECTED, target.name)
            return vc

        vc = await self._guarded(target.connect(self_deaf=True), "open")
        logger.info(LogTemplates.VOICE_CONNECTED, target.name)
        return vc

    async def close(self, handle: discord.VoiceClient) -> None:
        self._generation += 1
        if handle.is_playing() or handle.is_paused():
            handle.stop()
        self._cleanup()

        await self._guarded(handle.disconnect(force=True), "close")
        logger.info(LogTemplates.VOICE_DISCONNECTED, self._channel_name(handle))

    async def _guarded(self, coro: Awaitable[T], operation: str) -> T:
        try:
            async with asyncio.timeout(CONNECT_TIMEOUT):
                return await coro
        except TimeoutError as exc:
            raise SinkError(
                ErrorMessages.SINK_VOICE_FAILED.format(operation=operation, error="timed out"),
                operation=operation,
            ) from exc
        except discord.DiscordException as exc:
            raise SinkError(
                ErrorMessages.SINK_VOICE_FAILED.format(operation=operation, error=exc),
                operation=operation,
            ) from exc

    # ── Streaming ───────────────────────────────────────────────────

    async def start_streaming(self, handle: discord.VoiceClient, locator: str) -> int:
        if not handle.is_connected():
            raise SinkError(ErrorMessages.SINK_NOT_CONNECTED, operation="stream")

        self._loop = asyncio.get_running_loop()
        self._generation += 1
        generation = self._generation

        if handle.is_playing() or handle.is_paused():
            handle.stop()
        self._cleanup()

        try:
            self._process = subprocess.Popen(
                [
                    self._settings.ytdlp_binary,
                    "--quiet",
                    "-f",
                    self._settings.ytdlp_format,
                    "-o",
                    "-",
                    locator,
                ],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
            )
            source = discord.FFmpegPCMAudio(
                self._process.stdout,
                pipe=True,
                before_options=self._settings.ffmpeg_options.get("before_options") or None,
                options=self._settings.ffmpeg_options.get("options") or None,
            )
            self._source = discord.PCMVolumeTransformer(source, volume=self._settings.default_volume)

            def after_callback(error: Exception | None = None) -> None:
                # Runs on the voice player thread.
                logger.debug(LogTemplates.VOICE_STREAM_ENDED, self._channel_name(handle), error)
                status = SinkStatus.ERROR if error else SinkStatus.IDLE
                asyncio.run_coroutine_threadsafe(
                    self._report_end(handle, generation, status, error),
                    self._loop,
                )

            handle.play(self._source, after=after_callback)
        except (OSError, discord.ClientException) as exc:
            self._cleanup()
            raise SinkError(
                ErrorMessages.SINK_STREAM_FAILED.format(locator=locator, error=exc),
                operation="stream",
            ) from exc

        logger.info(LogTemplates.VOICE_STREAM_STARTED, locator)
        await self._notify(handle, generation, SinkStatus.PLAYING)
        return generation

    async def pause(self, handle: discord.VoiceClient) -> bool:
        if handle.is_playing():
            handle.pause()
            await self._notify(handle, self._generation, SinkStatus.PAUSED)
            return True
        return False

    async def resume(self, handle: discord.VoiceClient) -> bool:
        if handle.is_paused():
            handle.resume()
            await self._notify(handle, self._generation, SinkStatus.PLAYING)
            return True
        return False

    async def stop(self, handle: discord.VoiceClient) -> bool:
        # VoiceClient.stop() fires the after callback, which reports IDLE.
        if handle.is_playing() or handle.is_paused():
            handle.stop()
            return True
        return False

    # ── Internals ───────────────────────────────────────────────────

    async def _report_end(
        self,
        handle: discord.VoiceClient,
        generation: int,
        status: SinkStatus,
        error: Exception | None,
    ) -> None:
        if generation != self._generation:
            return
        self._cleanup()
        await self._notify(handle, generation, status, error)

    async def _notify(
        self,
        handle: discord.VoiceClient,
        generation: int,
        status: SinkStatus,
        error: Exception | None = None,
    ) -> None:
        if self._callback is None:
            return
        try:
            await self._callback(handle, generation, status, error)
        except Exception:
            logger.exception(LogTemplates.VOICE_CALLBACK_ERROR, self._channel_name(handle), status.value)

    def _cleanup(self) -> None:
        source, self._source = self._source, None
        if source is not None:
            try:
                source.cleanup()
            except Exception as e:
                logger.debug(LogTemplates.VOICE_SOURCE_CLEANUP_ERROR, e)

        process, self._process = self._process, None
        if process is not None and process.poll() is None:
            try:
                process.kill()
                process.wait(timeout=PROCESS_WAIT_TIMEOUT)
            except (OSError, subprocess.TimeoutExpired) as e:
                logger.debug(LogTemplates.VOICE_PROCESS_CLEANUP_ERROR, e)

    @staticmethod
    def _channel_name(handle: discord.VoiceClient) -> str | None:
        channel = getattr(handle, "channel", None)
        return getattr(channel, "name", None)
