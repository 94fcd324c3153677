"""
Unit Tests for the Music Domain

Tests for:
- TrackRecord validation and immutability
- TrackHistory FIFO eviction
- Value objects (LoopMode, PlaybackState)
- Domain services (elapsed time, locator classification, backfill, shuffle)
- Engine event union
"""

import random
from collections import Counter
from datetime import UTC, datetime, timedelta

import pytest
from pydantic import TypeAdapter, ValidationError

from queuecord.domain.music.entities import PlaylistRecord, TrackHistory, TrackRecord, TrackStub
from queuecord.domain.music.events import (
    EngineEvent,
    EventKind,
    PlaybackIdle,
    PlaybackStarted,
    SongAdded,
)
from queuecord.domain.music.services import (
    backfill_playlist_fields,
    classify_locator,
    elapsed_seconds,
    fisher_yates_shuffle,
    format_elapsed,
    normalize_url,
)
from queuecord.domain.music.value_objects import LocatorKind, LoopMode, PlaybackState
from queuecord.domain.shared.exceptions import NotAvailableError

# =============================================================================
# TrackRecord
# =============================================================================


class TestTrackRecord:
    """Tests for the TrackRecord model."""

    def test_minimal_record(self, track_factory):
        """Should default optional fields."""
        track = track_factory(1)

        assert track.id == "t1"
        assert track.age_limit == 0
        assert track.started_at is None
        assert track.playlist_id is None

    def test_full_record(self, sample_track):
        """Should accept every metadata field."""
        assert sample_track.upload_date == "20240102"
        assert sample_track.channel == "Sample Channel"
        assert sample_track.view_count == 1000

    def test_frozen(self, track_factory):
        """Should reject attribute assignment."""
        track = track_factory(1)

        with pytest.raises(ValidationError):
            track.title = "Changed"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("id", ""),
            ("title", ""),
            ("webpage_url", "ftp://example.com/a"),
            ("upload_date", "2024-01-02"),
            ("duration", -1),
            ("view_count", "100"),
        ],
    )
    def test_invalid_fields(self, track_factory, field, value):
        """Should reject malformed values."""
        with pytest.raises(ValidationError):
            track_factory(1, **{field: value})

    def test_naive_started_at_rejected(self, track_factory):
        """Should require a timezone-aware start time."""
        with pytest.raises(ValidationError):
            track_factory(1, started_at=datetime(2024, 1, 1, 12, 0))

    def test_started_at_copy(self, track_factory):
        """Should leave the original untouched when stamping a copy."""
        track = track_factory(1)
        now = datetime.now(UTC)

        started = track.model_copy(update={"started_at": now})

        assert track.started_at is None
        assert started.started_at == now
        assert started.id == track.id


class TestPlaylistRecord:
    def test_track_count(self):
        playlist = PlaylistRecord(
            id="PL1",
            tracks=[TrackStub(id="a", url="https://x.test/a"), TrackStub(id="b", url="https://x.test/b")],
        )

        assert playlist.track_count == 2

    def test_empty_playlist(self):
        assert PlaylistRecord(id="PL1").track_count == 0


# =============================================================================
# TrackHistory
# =============================================================================


class TestTrackHistory:
    """Tests for the bounded history buffer."""

    def test_default_capacity(self):
        assert TrackHistory().capacity == 10

    def test_push_and_pop_most_recent(self, track_factory):
        """Should pop the most recently pushed track."""
        history = TrackHistory()
        history.push(track_factory(1))
        history.push(track_factory(2))

        assert history.pop().id == "t2"
        assert len(history) == 1

    def test_evicts_oldest_first(self, track_factory):
        """Should drop the oldest entry once capacity is exceeded."""
        history = TrackHistory(capacity=3)

        evicted = [history.push(track_factory(n)) for n in range(1, 6)]

        assert len(history) == 3
        assert [t.id for t in history.snapshot()] == ["t3", "t4", "t5"]
        assert [e.id if e else None for e in evicted] == [None, None, None, "t1", "t2"]

    def test_pop_empty(self):
        """Should raise NotAvailableError when empty."""
        history = TrackHistory()

        with pytest.raises(NotAvailableError):
            history.pop()

    def test_bool_and_iteration(self, track_factory):
        history = TrackHistory()
        assert not history

        history.push(track_factory(1))
        history.push(track_factory(2))

        assert history
        assert len(history) == 2
        assert [t.id for t in history] == ["t1", "t2"]

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            TrackHistory(capacity=0)


# =============================================================================
# Value Objects
# =============================================================================


class TestValueObjects:
    def test_loop_mode_cycle(self):
        """Should cycle disabled -> song -> queue -> disabled."""
        assert LoopMode.DISABLED.next_mode() is LoopMode.SONG
        assert LoopMode.SONG.next_mode() is LoopMode.QUEUE
        assert LoopMode.QUEUE.next_mode() is LoopMode.DISABLED

    def test_playback_state_flags(self):
        assert PlaybackState.PLAYING.is_active and PlaybackState.PLAYING.is_playing
        assert PlaybackState.PAUSED.is_active and not PlaybackState.PAUSED.is_playing
        assert not PlaybackState.IDLE.is_active

    def test_only_three_persisted_states(self):
        assert {s.value for s in PlaybackState} == {"idle", "playing", "paused"}


# =============================================================================
# Domain Services
# =============================================================================


class TestElapsed:
    """Tests for elapsed-time derivation."""

    def test_never_started(self, track_factory):
        track = track_factory(1)

        assert elapsed_seconds(track) is None
        assert format_elapsed(track) == "00:00"

    def test_elapsed(self, track_factory):
        start = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        track = track_factory(1, started_at=start)

        assert elapsed_seconds(track, start + timedelta(seconds=75)) == 75
        assert format_elapsed(track, start + timedelta(seconds=75)) == "01:15"

    def test_minutes_not_wrapped_into_hours(self, track_factory):
        start = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        track = track_factory(1, started_at=start)

        assert format_elapsed(track, start + timedelta(hours=1, minutes=2, seconds=3)) == "62:03"

    def test_clock_skew_clamped(self, track_factory):
        start = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        track = track_factory(1, started_at=start)

        assert elapsed_seconds(track, start - timedelta(seconds=5)) == 0


class TestLocatorClassification:
    """Tests for classify_locator and normalize_url."""

    @pytest.mark.parametrize(
        "locator,expected",
        [
            ("https://www.youtube.com/playlist?list=PL123", LocatorKind.PLAYLIST),
            ("https://www.youtube.com/watch?v=abc&list=PL123", LocatorKind.PLAYLIST),
            ("www.youtube.com/watch?v=abc&list=PL123", LocatorKind.PLAYLIST),
            ("https://www.youtube.com/watch?v=abc", LocatorKind.URL),
            ("https://youtu.be/abc", LocatorKind.URL),
            ("http://example.com/a?playlist=1", LocatorKind.URL),
            ("never gonna give you up", LocatorKind.SEARCH),
            ("list=PL123", LocatorKind.SEARCH),
            ("youtube.com/watch?v=abc", LocatorKind.SEARCH),
        ],
    )
    def test_classify(self, locator, expected):
        assert classify_locator(locator) is expected

    @pytest.mark.parametrize("locator", ["", "   "])
    def test_empty_locator(self, locator):
        with pytest.raises(ValueError):
            classify_locator(locator)

    def test_normalize_url(self):
        assert normalize_url("www.example.com/a") == "https://www.example.com/a"
        assert normalize_url("  https://example.com  ") == "https://example.com"
        assert normalize_url("ftp://example.com") is None
        assert normalize_url("https://") is None


class TestBackfill:
    """Tests for playlist field backfill."""

    @pytest.fixture
    def playlist(self):
        return PlaylistRecord(
            id="PL1",
            title="Road Trip",
            uploader="DJ",
            uploader_id="@dj",
            channel="DJ Channel",
            channel_id="UC1",
            webpage_url="https://www.youtube.com/playlist?list=PL1",
            tracks=[TrackStub(id="t1", url="https://x.test/1"), TrackStub(id="t2", url="https://x.test/2")],
        )

    def test_fills_missing_fields(self, track_factory, playlist):
        track = backfill_playlist_fields(track_factory(1), playlist)

        assert track.playlist == "Road Trip"
        assert track.playlist_id == "PL1"
        assert track.playlist_title == "Road Trip"
        assert track.playlist_uploader == "DJ"
        assert track.playlist_uploader_id == "@dj"
        assert track.playlist_channel == "DJ Channel"
        assert track.playlist_channel_id == "UC1"
        assert track.playlist_webpage_url == playlist.webpage_url
        assert track.playlist_count == 2

    def test_keeps_existing_fields(self, track_factory, playlist):
        original = track_factory(1, playlist_id="OTHER", playlist_count=7)

        track = backfill_playlist_fields(original, playlist)

        assert track.playlist_id == "OTHER"
        assert track.playlist_count == 7
        assert track.playlist_title == "Road Trip"

    def test_returns_same_record_when_complete(self, track_factory):
        track = track_factory(1, playlist_id="PL9")
        playlist = PlaylistRecord(id="PL1")
        complete = track.model_copy(
            update={field: "x" for field in TrackRecord.PLAYLIST_FIELDS if field != "playlist_count"}
            | {"playlist_count": 0}
        )

        assert backfill_playlist_fields(complete, playlist) is complete


class TestFisherYates:
    """Tests for the in-place shuffle."""

    def test_permutation(self):
        items = list(range(20))

        fisher_yates_shuffle(items, random.Random(7))

        assert Counter(items) == Counter(range(20))
        assert items != list(range(20))

    def test_deterministic_with_seed(self):
        a, b = list(range(10)), list(range(10))

        fisher_yates_shuffle(a, random.Random(3))
        fisher_yates_shuffle(b, random.Random(3))

        assert a == b

    def test_uniformity(self):
        """Each ordering of three items should come up roughly equally often."""
        rng = random.Random(11)
        counts: Counter[tuple[int, ...]] = Counter()
        for _ in range(6000):
            items = [0, 1, 2]
            fisher_yates_shuffle(items, rng)
            counts[tuple(items)] += 1

        assert len(counts) == 6
        assert all(800 < c < 1200 for c in counts.values())

    @pytest.mark.parametrize("items", [[], [1]])
    def test_short_sequences(self, items):
        before = list(items)
        fisher_yates_shuffle(items, random.Random(1))
        assert items == before


# =============================================================================
# Events
# =============================================================================


class TestEngineEvents:
    def test_kind_tags(self, track_factory):
        assert PlaybackIdle().kind == EventKind.IDLE
        assert SongAdded(track=track_factory(1)).kind == "SongAdded"

    def test_discriminated_union(self, track_factory):
        """Should resolve the concrete event class from the kind tag."""
        adapter = TypeAdapter(EngineEvent)
        event = PlaybackStarted(track=track_factory(1))

        parsed = adapter.validate_python(event.model_dump())

        assert isinstance(parsed, PlaybackStarted)
        assert parsed.track.id == "t1"

    def test_events_are_frozen(self):
        event = PlaybackIdle()

        with pytest.raises(ValidationError):
            event.event_id = "other"
