"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from enum import Enum


class PlaybackState(Enum):
    """Persisted playback state of a queue engine.

    Notifications such as "skipped" or "stopped" are event kinds, never
    states; see :mod:`queuecord.domain.music.events`.
    """

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"

    @property
    def is_active(self) -> bool:
        return self in {PlaybackState.PLAYING, PlaybackState.PAUSED}

    @property
    def is_playing(self) -> bool:
        return self == PlaybackState.PLAYING


class PlaybackTrigger(Enum):
    """Inputs that move the persisted playback state."""

    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    FINISH = "finish"  # sink reported idle
    STOP = "stop"
    FAIL = "fail"  # sink error


class SinkStatus(Enum):
    """Coarse status transitions reported by an audio output sink."""

    PLAYING = "playing"
    IDLE = "idle"
    PAUSED = "paused"
    BUFFERING = "buffering"
    ERROR = "error"


class AdvanceReason(Enum):
    """Why the next idle notification advances the queue."""

    FINISHED = "finished"
    SKIPPED = "skipped"
    PREVIOUS = "previous"


class LocatorKind(Enum):
    """Classification of a locator passed to ``add_to_queue``."""

    PLAYLIST = "playlist"
    URL = "url"
    SEARCH = "search"


class LoopMode(Enum):
    """Loop mode settings for queue playback."""

    DISABLED = "disabled"
    SONG = "song"  # Replay the finished track
    QUEUE = "queue"  # Re-append finished tracks to the back

    def next_mode(self) -> LoopMode:
        """Cycle to next loop mode."""
        modes = list(LoopMode)
        current_index = modes.index(self)
        next_index = (current_index + 1) % len(modes)
        return modes[next_index]
