import asyncio
import random
from typing import Any

import pytest
import pytest_asyncio

from queuecord.application.interfaces.audio_sink import AudioSink, StatusCallback
from queuecord.application.interfaces.metadata_provider import MetadataProvider
from queuecord.domain.music.entities import PlaylistRecord, TrackRecord, TrackStub
from queuecord.domain.music.value_objects import SinkStatus
from queuecord.domain.shared.events import DomainEvent
from queuecord.domain.shared.exceptions import ProviderError, SinkError

# ============================================================================
# Track Factories
# ============================================================================


def make_track(n: int | str, **overrides: Any) -> TrackRecord:
    """Build a minimal valid TrackRecord numbered ``n``."""
    fields: dict[str, Any] = {
        "id": f"t{n}",
        "title": f"Track {n}",
        "webpage_url": f"https://www.youtube.com/watch?v=t{n}",
        "duration": 180,
    }
    fields.update(overrides)
    return TrackRecord(**fields)


@pytest.fixture
def track_factory():
    return make_track


@pytest.fixture
def sample_track():
    """A fully populated track record."""
    return make_track(
        "sample",
        fulltitle="Sample Track (Official Video)",
        thumbnail="https://i.ytimg.com/vi/tsample/hq.jpg",
        description="A sample",
        duration_string="3:00",
        view_count=1000,
        like_count=10,
        channel="Sample Channel",
        channel_url="https://www.youtube.com/@sample",
        uploader_url="https://www.youtube.com/@sample",
        upload_date="20240102",
        timestamp=1704153600,
    )


# ============================================================================
# Fake Ports
# ============================================================================


class FakeHandle:
    """Opaque connection handle handed out by FakeAudioSink."""

    def __init__(self, target: Any) -> None:
        self.target = target
        self.closed = False

    def __repr__(self) -> str:
        return f"FakeHandle({self.target!r})"


class FakeAudioSink(AudioSink):
    """In-memory sink that records every call.

    ``stop()`` reports IDLE through the status callback while the engine is
    still inside the call, like a real voice client does. With
    ``defer_idles`` set the idle is held back until :meth:`deliver_deferred`,
    or never delivered at all, like a voice client that has already moved on
    to a newer stream.
    """

    def __init__(self) -> None:
        self.callback: StatusCallback | None = None
        self.calls: list[tuple[Any, ...]] = []
        self.handles: list[FakeHandle] = []
        self.streaming: str | None = None
        self.paused = False
        self.open_error: SinkError | None = None
        self.stream_error: SinkError | None = None
        self.defer_idles = False
        self.deferred: list[tuple[FakeHandle, int]] = []
        self.stream: int | None = None
        self._next_stream = 0

    @property
    def handle(self) -> FakeHandle | None:
        return self.handles[-1] if self.handles else None

    @property
    def streamed(self) -> list[str]:
        return [call[1] for call in self.calls if call[0] == "stream"]

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    def set_status_callback(self, callback: StatusCallback) -> None:
        self.callback = callback

    async def open(self, target: Any) -> FakeHandle:
        self.calls.append(("open", target))
        if self.open_error is not None:
            raise self.open_error
        handle = FakeHandle(target)
        self.handles.append(handle)
        return handle

    async def start_streaming(self, handle: FakeHandle, locator: str) -> int:
        self.calls.append(("stream", locator))
        if self.stream_error is not None:
            raise self.stream_error
        self._next_stream += 1
        self.stream = self._next_stream
        self.streaming = locator
        self.paused = False
        return self.stream

    async def pause(self, handle: FakeHandle) -> bool:
        self.calls.append(("pause",))
        if self.streaming is None or self.paused:
            return False
        self.paused = True
        return True

    async def resume(self, handle: FakeHandle) -> bool:
        self.calls.append(("resume",))
        if self.streaming is None or not self.paused:
            return False
        self.paused = False
        return True

    async def stop(self, handle: FakeHandle) -> bool:
        self.calls.append(("stop",))
        if self.streaming is None:
            return False
        self.streaming = None
        self.paused = False
        if self.defer_idles:
            self.deferred.append((handle, self.stream))
        else:
            await self.callback(handle, self.stream, SinkStatus.IDLE, None)
        return True

    async def close(self, handle: FakeHandle) -> None:
        self.calls.append(("close",))
        handle.closed = True
        self.streaming = None
        self.paused = False

    async def finish(self) -> None:
        """Simulate the current stream reaching its natural end."""
        self.streaming = None
        self.paused = False
        await self.callback(self.handle, self.stream, SinkStatus.IDLE, None)

    async def fail(self, error: Exception | None = None) -> None:
        """Simulate the stream dying with an error."""
        self.streaming = None
        await self.callback(self.handle, self.stream, SinkStatus.ERROR, error)

    async def deliver_deferred(self) -> None:
        """Report the idles held back by ``defer_idles``."""
        deferred, self.deferred = self.deferred, []
        for handle, stream in deferred:
            await self.callback(handle, stream, SinkStatus.IDLE, None)


class FakeMetadataProvider(MetadataProvider):
    """Provider backed by dictionaries; unknown locators raise ProviderError."""

    def __init__(self) -> None:
        self.tracks: dict[str, TrackRecord] = {}
        self.playlists: dict[str, PlaylistRecord] = {}
        self.delays: dict[str, float] = {}
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def register(self, track: TrackRecord, *locators: str) -> TrackRecord:
        self.tracks[track.webpage_url] = track
        for locator in locators:
            self.tracks[locator] = track
        return track

    def register_playlist(self, url: str, tracks: list[TrackRecord], **fields: Any) -> PlaylistRecord:
        for track in tracks:
            self.register(track)
        playlist = PlaylistRecord(
            id=fields.pop("id", "PL1"),
            title=fields.pop("title", "Road Trip"),
            tracks=[TrackStub(id=t.id, url=t.webpage_url, title=t.title) for t in tracks],
            **fields,
        )
        self.playlists[url] = playlist
        return playlist

    async def fetch_metadata(self, locator: str) -> TrackRecord:
        self.calls.append(locator)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(locator, 0))
        finally:
            self.in_flight -= 1
        try:
            return self.tracks[locator]
        except KeyError:
            raise ProviderError(locator) from None

    async def fetch_playlist(self, url: str) -> PlaylistRecord:
        self.calls.append(url)
        try:
            return self.playlists[url]
        except KeyError:
            raise ProviderError(url) from None


class EventRecorder:
    """Collects every event published on a bus, in order."""

    def __init__(self) -> None:
        self.events: list[DomainEvent] = []

    def __call__(self, event: DomainEvent) -> None:
        self.events.append(event)

    @property
    def kinds(self) -> list[str]:
        return [str(event.kind) for event in self.events]

    def of_type(self, event_type: type[DomainEvent]) -> list[DomainEvent]:
        return [event for event in self.events if isinstance(event, event_type)]

    def clear(self) -> None:
        self.events.clear()


# ============================================================================
# Engine Fixtures
# ============================================================================


VOICE_TARGET = "voice-channel-1"


@pytest.fixture
def voice_target():
    return VOICE_TARGET


@pytest.fixture
def sink():
    return FakeAudioSink()


@pytest.fixture
def sink_factory():
    """Per-guild sink factory; built sinks are kept in ``factory.sinks``."""
    sinks: dict[int, FakeAudioSink] = {}

    def factory(guild_id: int) -> FakeAudioSink:
        sinks[guild_id] = FakeAudioSink()
        return sinks[guild_id]

    factory.sinks = sinks  # type: ignore[attr-defined]
    return factory


@pytest.fixture
def provider():
    return FakeMetadataProvider()


@pytest.fixture
def queue_settings():
    from queuecord.config.settings import QueueSettings

    return QueueSettings(history_capacity=10, max_fetch_concurrency=5)


@pytest_asyncio.fixture
async def engine(provider, sink, queue_settings):
    """A queue engine wired to the fakes, with a session target already set."""
    from queuecord.application.services.queue_engine import QueueEngine

    engine = QueueEngine(
        provider=provider,
        sink=sink,
        settings=queue_settings,
        rng=random.Random(1234),
        target=VOICE_TARGET,
    )
    yield engine
    await engine.close()


@pytest.fixture
def recorder(engine):
    recorder = EventRecorder()
    engine.events.subscribe(DomainEvent, recorder)
    return recorder
