"""Events published by the queue engine.

Each event is a frozen model tagged by a literal ``kind``; :data:`EngineEvent`
is the discriminated union over all of them.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import Field

from queuecord.domain.music.entities import TrackRecord
from queuecord.domain.music.value_objects import LoopMode
from queuecord.domain.shared.events import DomainEvent


class EventKind(StrEnum):
    ERROR = "Error"
    IDLE = "Idle"
    PAUSED = "Paused"
    UNPAUSED = "Unpaused"
    PLAYING = "Playing"
    PLAYLIST_ADDED = "PlaylistAdded"
    SONG_ADDED = "SongAdded"
    SHUFFLED = "Shuffled"
    SKIPPED = "Skipped"
    STOPPED = "Stopped"
    PREVIOUS = "Previous"
    LOOP_CHANGED = "LoopChanged"


class PlaybackErrored(DomainEvent):
    kind: Literal[EventKind.ERROR] = EventKind.ERROR
    error: Exception


class PlaybackIdle(DomainEvent):
    kind: Literal[EventKind.IDLE] = EventKind.IDLE


class PlaybackPaused(DomainEvent):
    kind: Literal[EventKind.PAUSED] = EventKind.PAUSED
    track: TrackRecord


class PlaybackUnpaused(DomainEvent):
    kind: Literal[EventKind.UNPAUSED] = EventKind.UNPAUSED
    track: TrackRecord


class PlaybackStarted(DomainEvent):
    kind: Literal[EventKind.PLAYING] = EventKind.PLAYING
    track: TrackRecord


class PlaylistAdded(DomainEvent):
    kind: Literal[EventKind.PLAYLIST_ADDED] = EventKind.PLAYLIST_ADDED
    tracks: tuple[TrackRecord, ...]


class SongAdded(DomainEvent):
    kind: Literal[EventKind.SONG_ADDED] = EventKind.SONG_ADDED
    track: TrackRecord


class QueueShuffled(DomainEvent):
    kind: Literal[EventKind.SHUFFLED] = EventKind.SHUFFLED
    queue: tuple[TrackRecord, ...]


class TrackSkipped(DomainEvent):
    kind: Literal[EventKind.SKIPPED] = EventKind.SKIPPED
    track: TrackRecord | None = None


class PlaybackStopped(DomainEvent):
    kind: Literal[EventKind.STOPPED] = EventKind.STOPPED
    track: TrackRecord | None = None


class PreviousTrack(DomainEvent):
    kind: Literal[EventKind.PREVIOUS] = EventKind.PREVIOUS
    current_track: TrackRecord | None = None
    new_track: TrackRecord


class LoopChanged(DomainEvent):
    kind: Literal[EventKind.LOOP_CHANGED] = EventKind.LOOP_CHANGED
    mode: LoopMode


EngineEvent = Annotated[
    PlaybackErrored
    | PlaybackIdle
    | PlaybackPaused
    | PlaybackUnpaused
    | PlaybackStarted
    | PlaylistAdded
    | SongAdded
    | QueueShuffled
    | TrackSkipped
    | PlaybackStopped
    | PreviousTrack
    | LoopChanged,
    Field(discriminator="kind"),
]
