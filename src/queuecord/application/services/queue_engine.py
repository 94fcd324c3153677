"""Queue Engine - per-guild playback queue state machine.

The engine owns the queue, the history window, the loop mode and the
persisted playback state. It drives an :class:`AudioSink` and publishes
engine events on its own :class:`EventBus`.

Caller operations and sink notifications are serialized by one
``asyncio.Lock``. Sink notifications go through an inbox processed by a
single worker task, so a sink that reports status from inside one of its own
calls never re-enters the engine. Only notifications tagged with the token
of the stream the engine is currently waiting on are acted upon. Events
produced under the lock are published after it is released.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from queuecord.config.settings import QueueSettings
from queuecord.domain.music.entities import PlaylistRecord, TrackHistory, TrackRecord
from queuecord.domain.music.events import (
    EventKind,
    LoopChanged,
    PlaybackErrored,
    PlaybackIdle,
    PlaybackPaused,
    PlaybackStarted,
    PlaybackStopped,
    PlaybackUnpaused,
    PlaylistAdded,
    PreviousTrack,
    QueueShuffled,
    SongAdded,
    TrackSkipped,
)
from queuecord.domain.music.services import (
    backfill_playlist_fields,
    classify_locator,
    fisher_yates_shuffle,
    normalize_url,
)
from queuecord.domain.music.state_machine import transition
from queuecord.domain.music.value_objects import (
    AdvanceReason,
    LocatorKind,
    LoopMode,
    PlaybackState,
    PlaybackTrigger,
    SinkStatus,
)
from queuecord.domain.shared.datetime_utils import utcnow
from queuecord.domain.shared.events import DomainEvent, EventBus
from queuecord.domain.shared.exceptions import (
    InvalidArgumentError,
    NotAvailableError,
    ProviderError,
    SinkError,
)
from queuecord.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from queuecord.application.interfaces.audio_sink import AudioSink, ConnectionHandle, StreamId
    from queuecord.application.interfaces.metadata_provider import MetadataProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SinkNotification:
    """A status transition reported by the sink, queued for the worker."""

    handle: Any
    stream: Any
    status: SinkStatus
    error: Exception | None = None


class QueueEngine:
    """Playback queue state machine for a single audio output sink."""

    def __init__(
        self,
        *,
        provider: MetadataProvider,
        sink: AudioSink,
        settings: QueueSettings | None = None,
        event_bus: EventBus | None = None,
        rng: random.Random | None = None,
        target: Any = None,
    ) -> None:
        self._provider = provider
        self._sink = sink
        self._settings = settings or QueueSettings()
        self._events = event_bus or EventBus()
        self._rng = rng or random.Random()

        self._queue: list[TrackRecord] = []
        self._history = TrackHistory(self._settings.history_capacity)
        self._state = PlaybackState.IDLE
        self._loop_mode = LoopMode.DISABLED

        # How the next idle notification advances the queue.
        self._advance_reason = AdvanceReason.FINISHED
        # Token of the stream whose end advances the queue; None when no
        # stream is expected to report.
        self._stream: StreamId | None = None

        self._target = target
        self._connection: ConnectionHandle | None = None

        self._lock = asyncio.Lock()
        self._inbox: asyncio.Queue[SinkNotification] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None

        self._sink.set_status_callback(self.on_sink_status)

    # === Read-only views ===

    @property
    def events(self) -> EventBus:
        return self._events

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def loop_mode(self) -> LoopMode:
        return self._loop_mode

    @property
    def current_track(self) -> TrackRecord | None:
        """The front of the queue while it is streaming, else None."""
        if self._state.is_active and self._queue:
            return self._queue[0]
        return None

    @property
    def history(self) -> tuple[TrackRecord, ...]:
        """Completed tracks, oldest first."""
        return self._history.snapshot()

    @property
    def should_play(self) -> bool:
        """True when the queue has tracks and nothing holds the sink."""
        return bool(self._queue) and not self._state.is_active

    def get_queue(self) -> tuple[TrackRecord, ...]:
        return tuple(self._queue)

    def get_state(self) -> PlaybackState:
        return self._state

    # === Caller operations ===

    async def add_to_queue(
        self,
        locator: str,
        context: Any = None,
        shuffle_after: bool = False,
    ) -> list[TrackRecord]:
        """Resolve *locator* and append the resulting track(s), then play.

        Args:
            locator: A playlist URL, a track URL or a free-text search term.
            context: Session target the sink opens its connection on
                (e.g. a voice channel). Remembered for later playback.
            shuffle_after: Shuffle the queue after insertion, before playback.

        Returns:
            The records that were added, in queue order.

        Raises:
            ProviderError: If the metadata could not be fetched. An ``Error``
                event is published first and the queue is left unchanged.
        """
        kind = classify_locator(locator)
        errors: list[DomainEvent] = []

        try:
            if kind is LocatorKind.PLAYLIST:
                playlist, tracks, failures = await self._fetch_playlist(normalize_url(locator) or locator)
                errors = [PlaybackErrored(error=failure) for failure in failures]
            else:
                query = normalize_url(locator) if kind is LocatorKind.URL else locator.strip()
                tracks = [await self._provider.fetch_metadata(query or locator)]
        except ProviderError as exc:
            logger.warning(LogTemplates.PROVIDER_FAILED, locator, exc)
            await self._events.publish(PlaybackErrored(error=exc))
            raise

        async with self._lock:
            if context is not None:
                self._target = context
            self._queue.extend(tracks)

            events: list[DomainEvent] = list(errors)
            if kind is LocatorKind.PLAYLIST:
                logger.info(
                    LogTemplates.QUEUE_PLAYLIST_ADDED, len(tracks), playlist.title or playlist.id, len(self._queue)
                )
                events.append(PlaylistAdded(tracks=tuple(tracks)))
            else:
                logger.info(LogTemplates.QUEUE_SONG_ADDED, tracks[0].title, len(self._queue))
                events.append(SongAdded(track=tracks[0]))

            if shuffle_after:
                events.append(self._shuffle_queue())
            events.extend(await self._start_next())

        await self._events.publish_all(events)
        return tracks

    async def play(self) -> PlaybackState:
        """Start the front track if the queue has one and nothing is playing.

        Calling this while already playing is a no-op.
        """
        async with self._lock:
            events = await self._start_next()
        await self._events.publish_all(events)
        return self._state

    async def pause(self) -> bool:
        """Toggle pause/resume. Returns True if the sink changed state."""
        async with self._lock:
            events = await self._toggle_pause()
        await self._events.publish_all(events)
        return any(isinstance(e, PlaybackPaused | PlaybackUnpaused) for e in events)

    async def stop(self) -> TrackRecord | None:
        """Clear the queue and stop the sink. Returns the track that was playing."""
        async with self._lock:
            track = self.current_track
            events = await self._stop()
        await self._events.publish_all(events)
        return track

    async def skip(self, position: int | None = None) -> EventKind:
        """Skip forward.

        Args:
            position: 1-based index into the upcoming tracks to jump to;
                defaults to 1 (the next track). Entries before it are
                discarded without being archived.

        Returns:
            ``EventKind.STOPPED`` if the queue held a single track (the call
            behaves like :meth:`stop`), otherwise ``EventKind.SKIPPED``.

        Raises:
            NotAvailableError: If the queue is empty.
            InvalidArgumentError: If *position* is outside ``[1, len(queue) - 1]``.
        """
        async with self._lock:
            if not self._queue:
                raise NotAvailableError("track to skip", ErrorMessages.QUEUE_EMPTY)

            if len(self._queue) == 1:
                events = await self._stop()
                result = EventKind.STOPPED
            else:
                target = 1 if position is None else position
                if not 1 <= target < len(self._queue):
                    raise InvalidArgumentError(
                        "position",
                        ErrorMessages.INVALID_SKIP_POSITION.format(
                            max_position=len(self._queue) - 1, position=target
                        ),
                    )

                current = self.current_track
                logger.info(LogTemplates.QUEUE_SKIPPED, current.title if current else None, target)
                del self._queue[:target]
                events = [TrackSkipped(track=current)]
                events.extend(await self._force_advance(AdvanceReason.SKIPPED))
                result = EventKind.SKIPPED

        await self._events.publish_all(events)
        return result

    async def previous(self) -> TrackRecord:
        """Put the most recently completed track back at the front and play it.

        Raises:
            NotAvailableError: If the history is empty.
        """
        async with self._lock:
            restored = self._history.pop()
            current = self.current_track
            logger.info(LogTemplates.QUEUE_PREVIOUS, restored.title)

            if self._queue and self._queue[0].started_at is not None:
                self._queue[0] = self._queue[0].model_copy(update={"started_at": None})
            self._queue.insert(0, restored)
            events: list[DomainEvent] = [PreviousTrack(current_track=current, new_track=restored)]
            events.extend(await self._force_advance(AdvanceReason.PREVIOUS))

        await self._events.publish_all(events)
        return restored

    async def shuffle(self) -> tuple[TrackRecord, ...]:
        """Shuffle the queue, keeping the streaming front track in place."""
        async with self._lock:
            event = self._shuffle_queue()
        await self._events.publish(event)
        return event.queue

    async def loop(self) -> LoopMode:
        """Advance the loop mode (disabled -> song -> queue -> disabled)."""
        async with self._lock:
            self._loop_mode = self._loop_mode.next_mode()
            mode = self._loop_mode
        logger.info(LogTemplates.QUEUE_LOOP_CHANGED, mode.value)
        await self._events.publish(LoopChanged(mode=mode))
        return mode

    async def close(self) -> None:
        """Stop playback, release the sink connection and stop the worker."""
        async with self._lock:
            events = await self._stop()
            await self._release_connection()

        worker = self._worker
        if worker is not None and not worker.done() and worker is not asyncio.current_task():
            worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await worker
        self._worker = None

        while not self._inbox.empty():
            self._inbox.get_nowait()
            self._inbox.task_done()

        await self._events.publish_all(events)

    # === Sink notifications ===

    async def on_sink_status(
        self,
        handle: ConnectionHandle,
        stream: StreamId,
        status: SinkStatus,
        error: Exception | None = None,
    ) -> None:
        """Queue a sink status transition for the worker."""
        self._inbox.put_nowait(
            SinkNotification(handle=handle, stream=stream, status=status, error=error)
        )
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._process_inbox())

    async def settle(self) -> None:
        """Wait until every queued sink notification has been processed."""
        await self._inbox.join()

    async def _process_inbox(self) -> None:
        while True:
            notification = await self._inbox.get()
            try:
                await self._handle_notification(notification)
            except Exception:
                logger.exception(LogTemplates.PLAYBACK_NOTIFICATION_FAILED, notification.status.value)
            finally:
                self._inbox.task_done()

    async def _handle_notification(self, notification: SinkNotification) -> None:
        async with self._lock:
            if self._connection is None or notification.handle is not self._connection:
                logger.debug(LogTemplates.PLAYBACK_STALE_STATUS, notification.status.value)
                return
            if self._stream is None or notification.stream != self._stream:
                logger.debug(
                    LogTemplates.PLAYBACK_STALE_STREAM, notification.status.value, notification.stream
                )
                return

            if notification.status is SinkStatus.IDLE:
                events = await self._on_idle()
            elif notification.status is SinkStatus.ERROR:
                error = notification.error
                if not isinstance(error, SinkError):
                    error = SinkError(
                        ErrorMessages.SINK_REPORTED_ERROR.format(error=error), operation="stream"
                    )
                events = await self._fail(error)
            else:
                logger.debug(LogTemplates.PLAYBACK_SINK_STATUS, notification.status.value)
                events = []

        await self._events.publish_all(events)

    # === Transitions (called with the lock held) ===

    async def _start_next(self) -> list[DomainEvent]:
        if not self.should_play:
            if self._state.is_playing:
                logger.debug(LogTemplates.PLAYBACK_ALREADY_PLAYING)
            return []

        track = self._queue[0]
        try:
            handle = await self._ensure_connection()
            stream = await self._sink.start_streaming(handle, track.webpage_url)
        except SinkError as exc:
            return await self._fail(exc)

        self._stream = stream
        track = track.model_copy(update={"started_at": utcnow()})
        self._queue[0] = track
        self._state = transition(self._state, PlaybackTrigger.START)
        self._advance_reason = AdvanceReason.FINISHED
        logger.info(LogTemplates.PLAYBACK_STARTED, track.title)
        return [PlaybackStarted(track=track)]

    async def _on_idle(self) -> list[DomainEvent]:
        if not self._state.is_active:
            logger.debug(LogTemplates.PLAYBACK_IDLE_IGNORED, self._state.value)
            return []

        reason = self._advance_reason
        self._advance_reason = AdvanceReason.FINISHED
        self._stream = None
        self._state = transition(self._state, PlaybackTrigger.FINISH)
        events: list[DomainEvent] = [PlaybackIdle()]

        if reason is AdvanceReason.FINISHED and self._queue:
            finished = self._queue.pop(0).model_copy(update={"started_at": None})
            logger.info(LogTemplates.PLAYBACK_FINISHED, finished.title, reason.value)
            self._archive(finished)
            if self._loop_mode is LoopMode.SONG:
                self._queue.insert(0, finished)
            elif self._loop_mode is LoopMode.QUEUE:
                self._queue.append(finished)

        if self._queue:
            events.extend(await self._start_next())
        else:
            logger.info(LogTemplates.PLAYBACK_QUEUE_EMPTY)
        return events

    async def _force_advance(self, reason: AdvanceReason) -> list[DomainEvent]:
        """Make the sink go idle so the standard advance runs with *reason*.

        With nothing streaming there is no idle notification to wait for, so
        playback starts directly.
        """
        if not self._state.is_active or self._connection is None:
            return await self._start_next()

        self._advance_reason = reason
        try:
            if await self._sink.stop(self._connection):
                return []
        except SinkError as exc:
            return await self._fail(exc)

        # The stream had already ended on its own; its idle, if still queued,
        # is stale once the next stream starts.
        self._stream = None
        self._state = transition(self._state, PlaybackTrigger.FINISH)
        self._advance_reason = AdvanceReason.FINISHED
        return await self._start_next()

    async def _toggle_pause(self) -> list[DomainEvent]:
        track = self.current_track
        if track is None or self._connection is None:
            return []

        try:
            if self._state is PlaybackState.PLAYING:
                if not await self._sink.pause(self._connection):
                    logger.debug(LogTemplates.PLAYBACK_PAUSE_REJECTED, "pause")
                    return []
                self._state = transition(self._state, PlaybackTrigger.PAUSE)
                logger.info(LogTemplates.PLAYBACK_PAUSED, track.title)
                return [PlaybackPaused(track=track)]

            if not await self._sink.resume(self._connection):
                logger.debug(LogTemplates.PLAYBACK_PAUSE_REJECTED, "resume")
                return []
            self._state = transition(self._state, PlaybackTrigger.RESUME)
            logger.info(LogTemplates.PLAYBACK_RESUMED, track.title)
            return [PlaybackUnpaused(track=track)]
        except SinkError as exc:
            return await self._fail(exc)

    async def _stop(self) -> list[DomainEvent]:
        track = self.current_track
        cleared = len(self._queue)
        self._queue.clear()
        self._advance_reason = AdvanceReason.FINISHED
        events: list[DomainEvent] = []

        if self._connection is not None and self._state.is_active:
            # The stopped stream's idle, whenever it arrives, no longer matches.
            self._stream = None
            try:
                await self._sink.stop(self._connection)
            except SinkError as exc:
                events.extend(await self._fail(exc))

        self._state = transition(self._state, PlaybackTrigger.STOP)
        logger.info(LogTemplates.QUEUE_STOPPED, cleared)
        events.extend([PlaybackStopped(track=track), PlaybackIdle()])
        return events

    async def _fail(self, error: SinkError) -> list[DomainEvent]:
        logger.error(LogTemplates.PLAYBACK_SINK_ERROR, error)
        self._state = transition(self._state, PlaybackTrigger.FAIL)
        self._advance_reason = AdvanceReason.FINISHED
        self._stream = None
        if self._queue and self._queue[0].started_at is not None:
            self._queue[0] = self._queue[0].model_copy(update={"started_at": None})
        await self._release_connection()
        return [PlaybackErrored(error=error)]

    def _shuffle_queue(self) -> QueueShuffled:
        hold_front = self._state.is_active and bool(self._queue)
        head = self._queue[:1] if hold_front else []
        rest = self._queue[1:] if hold_front else list(self._queue)

        fisher_yates_shuffle(rest, self._rng)
        self._queue[:] = head + rest
        logger.info(LogTemplates.QUEUE_SHUFFLED, len(rest), hold_front)
        return QueueShuffled(queue=tuple(self._queue))

    def _archive(self, track: TrackRecord) -> None:
        evicted = self._history.push(track)
        if evicted is not None:
            logger.debug(LogTemplates.QUEUE_HISTORY_EVICTED, evicted.title)

    # === Sink connection ===

    async def _ensure_connection(self) -> ConnectionHandle:
        if self._connection is None:
            if self._target is None:
                raise SinkError(ErrorMessages.NO_SESSION_TARGET, operation="open")
            self._connection = await self._sink.open(self._target)
        return self._connection

    async def _release_connection(self) -> None:
        handle, self._connection = self._connection, None
        # Notifications from the released handle are dropped as stale.
        self._stream = None
        if handle is None:
            return
        try:
            await self._sink.close(handle)
        except SinkError as exc:
            logger.warning(LogTemplates.SINK_CLOSE_FAILED, exc)

    # === Playlist expansion ===

    async def _fetch_playlist(
        self, url: str
    ) -> tuple[PlaylistRecord, list[TrackRecord], list[ProviderError]]:
        """Fetch every playlist member concurrently, keeping playlist order.

        Members that fail are left out and returned as failures; if none
        resolve, the whole call fails.
        """
        playlist = await self._provider.fetch_playlist(url)
        semaphore = asyncio.Semaphore(self._settings.max_fetch_concurrency)
        results: list[TrackRecord | ProviderError | None] = [None] * playlist.track_count

        async def fetch_member(index: int, member_url: str) -> None:
            async with semaphore:
                try:
                    track = await self._provider.fetch_metadata(member_url)
                    results[index] = backfill_playlist_fields(track, playlist)
                except ProviderError as exc:
                    logger.warning(LogTemplates.QUEUE_PLAYLIST_MEMBER_FAILED, member_url, exc)
                    results[index] = exc

        async with asyncio.TaskGroup() as tg:
            for index, stub in enumerate(playlist.tracks):
                tg.create_task(fetch_member(index, stub.url))

        tracks = [r for r in results if isinstance(r, TrackRecord)]
        failures = [r for r in results if isinstance(r, ProviderError)]
        if not tracks:
            raise ProviderError(url, ErrorMessages.PLAYLIST_EMPTY.format(url=url))
        return playlist, tracks, failures
