"""Playback state transitions.

All persisted state changes of a queue engine go through :func:`transition`,
so the full table lives in one place:

- IDLE    -> PLAYING (START)
- PLAYING -> PAUSED  (PAUSE)
- PAUSED  -> PLAYING (RESUME)
- PLAYING -> IDLE    (FINISH, STOP, FAIL)
- PAUSED  -> IDLE    (FINISH, STOP, FAIL)
- IDLE    -> IDLE    (STOP, FAIL)
"""

from __future__ import annotations

from typing import Final

from queuecord.domain.music.value_objects import PlaybackState, PlaybackTrigger
from queuecord.domain.shared.exceptions import InvalidOperationError
from queuecord.domain.shared.messages import ErrorMessages

TRANSITIONS: Final[dict[tuple[PlaybackState, PlaybackTrigger], PlaybackState]] = {
    (PlaybackState.IDLE, PlaybackTrigger.START): PlaybackState.PLAYING,
    (PlaybackState.IDLE, PlaybackTrigger.STOP): PlaybackState.IDLE,
    (PlaybackState.IDLE, PlaybackTrigger.FAIL): PlaybackState.IDLE,
    (PlaybackState.PLAYING, PlaybackTrigger.PAUSE): PlaybackState.PAUSED,
    (PlaybackState.PLAYING, PlaybackTrigger.FINISH): PlaybackState.IDLE,
    (PlaybackState.PLAYING, PlaybackTrigger.STOP): PlaybackState.IDLE,
    (PlaybackState.PLAYING, PlaybackTrigger.FAIL): PlaybackState.IDLE,
    (PlaybackState.PAUSED, PlaybackTrigger.RESUME): PlaybackState.PLAYING,
    (PlaybackState.PAUSED, PlaybackTrigger.FINISH): PlaybackState.IDLE,
    (PlaybackState.PAUSED, PlaybackTrigger.STOP): PlaybackState.IDLE,
    (PlaybackState.PAUSED, PlaybackTrigger.FAIL): PlaybackState.IDLE,
}


def can_transition(state: PlaybackState, trigger: PlaybackTrigger) -> bool:
    return (state, trigger) in TRANSITIONS


def transition(state: PlaybackState, trigger: PlaybackTrigger) -> PlaybackState:
    """Return the state reached from *state* on *trigger*.

    Raises:
        InvalidOperationError: If the table has no entry for the pair.
    """
    try:
        return TRANSITIONS[(state, trigger)]
    except KeyError:
        raise InvalidOperationError(
            operation=trigger.value,
            current_state=state.value,
            message=ErrorMessages.INVALID_TRANSITION.format(
                state=state.value, trigger=trigger.value
            ),
        ) from None
