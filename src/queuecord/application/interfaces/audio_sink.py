"""Port interface for the audio output sink."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from queuecord.domain.music.value_objects import SinkStatus

ConnectionHandle = Any
"""Opaque per-session connection returned by :meth:`AudioSink.open`."""

StreamId = Any
"""Opaque token for one stream, returned by :meth:`AudioSink.start_streaming`."""

StatusCallback = Callable[
    [ConnectionHandle, StreamId, SinkStatus, Exception | None], Awaitable[None]
]


class AudioSink(ABC):
    """Interface for streaming audio to a session target (e.g. a voice channel).

    Failures raise :class:`~queuecord.domain.shared.exceptions.SinkError`.
    Status transitions are reported asynchronously through the callback
    registered with :meth:`set_status_callback`, tagged with the token of
    the stream they belong to. The idle that follows a successful
    :meth:`stop` may arrive late, or not at all once a newer stream started.
    """

    @abstractmethod
    async def open(self, target: Any) -> ConnectionHandle:
        """Connect to *target* and return a handle for later calls."""
        ...

    @abstractmethod
    async def start_streaming(self, handle: ConnectionHandle, locator: str) -> StreamId:
        """Stream the audio behind *locator*, replacing any previous stream.

        Returns a token that differs from every earlier stream on this sink.
        """
        ...

    @abstractmethod
    async def pause(self, handle: ConnectionHandle) -> bool:
        """Pause the stream; True if the state actually changed."""
        ...

    @abstractmethod
    async def resume(self, handle: ConnectionHandle) -> bool:
        """Resume the stream; True if the state actually changed."""
        ...

    @abstractmethod
    async def stop(self, handle: ConnectionHandle) -> bool:
        """Stop the stream; True if one was running."""
        ...

    @abstractmethod
    async def close(self, handle: ConnectionHandle) -> None:
        """Tear down the stream and release the connection."""
        ...

    @abstractmethod
    def set_status_callback(self, callback: StatusCallback) -> None:
        """Set callback for status transitions."""
        ...
