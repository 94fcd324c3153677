"""Tests for the playback state transition table."""

import pytest

from queuecord.domain.music.state_machine import TRANSITIONS, can_transition, transition
from queuecord.domain.music.value_objects import PlaybackState, PlaybackTrigger
from queuecord.domain.shared.exceptions import InvalidOperationError

IDLE = PlaybackState.IDLE
PLAYING = PlaybackState.PLAYING
PAUSED = PlaybackState.PAUSED


class TestTransitions:
    """Tests for transition()."""

    @pytest.mark.parametrize(
        "state,trigger,expected",
        [
            (IDLE, PlaybackTrigger.START, PLAYING),
            (PLAYING, PlaybackTrigger.PAUSE, PAUSED),
            (PAUSED, PlaybackTrigger.RESUME, PLAYING),
            (PLAYING, PlaybackTrigger.FINISH, IDLE),
            (PAUSED, PlaybackTrigger.FINISH, IDLE),
            (PLAYING, PlaybackTrigger.STOP, IDLE),
            (PAUSED, PlaybackTrigger.STOP, IDLE),
            (IDLE, PlaybackTrigger.STOP, IDLE),
            (PLAYING, PlaybackTrigger.FAIL, IDLE),
            (IDLE, PlaybackTrigger.FAIL, IDLE),
        ],
    )
    def test_valid_transitions(self, state, trigger, expected):
        """Should reach the tabled state."""
        assert transition(state, trigger) is expected
        assert can_transition(state, trigger)

    @pytest.mark.parametrize(
        "state,trigger",
        [
            (IDLE, PlaybackTrigger.PAUSE),
            (IDLE, PlaybackTrigger.RESUME),
            (IDLE, PlaybackTrigger.FINISH),
            (PLAYING, PlaybackTrigger.START),
            (PLAYING, PlaybackTrigger.RESUME),
            (PAUSED, PlaybackTrigger.PAUSE),
            (PAUSED, PlaybackTrigger.START),
        ],
    )
    def test_invalid_transitions(self, state, trigger):
        """Should raise InvalidOperationError naming state and trigger."""
        assert not can_transition(state, trigger)

        with pytest.raises(InvalidOperationError) as exc_info:
            transition(state, trigger)

        assert exc_info.value.operation == trigger.value
        assert exc_info.value.current_state == state.value
        assert exc_info.value.code == "INVALID_OPERATION"

    def test_every_target_is_a_persisted_state(self):
        """Should only ever land in idle, playing or paused."""
        assert set(TRANSITIONS.values()) <= set(PlaybackState)

    def test_stop_reaches_idle_from_anywhere(self):
        for state in PlaybackState:
            assert transition(state, PlaybackTrigger.STOP) is IDLE
