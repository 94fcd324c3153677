"""
Music Bounded Context

Track records, playback state, transition table and engine events.
"""

from queuecord.domain.music.entities import PlaylistRecord, TrackHistory, TrackRecord, TrackStub
from queuecord.domain.music.events import (
    EngineEvent,
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
from queuecord.domain.music.services import elapsed_seconds, format_elapsed
from queuecord.domain.music.value_objects import LocatorKind, LoopMode, PlaybackState, SinkStatus

__all__ = [
    # Entities
    "TrackRecord",
    "TrackStub",
    "PlaylistRecord",
    "TrackHistory",
    # Value Objects
    "PlaybackState",
    "LoopMode",
    "SinkStatus",
    "LocatorKind",
    # Events
    "EngineEvent",
    "EventKind",
    "PlaybackErrored",
    "PlaybackIdle",
    "PlaybackPaused",
    "PlaybackUnpaused",
    "PlaybackStarted",
    "PlaylistAdded",
    "SongAdded",
    "QueueShuffled",
    "TrackSkipped",
    "PlaybackStopped",
    "PreviousTrack",
    "LoopChanged",
    # Services
    "elapsed_seconds",
    "format_elapsed",
]
