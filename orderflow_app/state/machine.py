"""
Playback state machine.

IDLE --play--> PLAYING --pause / end of data--> PAUSED --play--> PLAYING
Any state --reset--> IDLE (new session, instrument change)

Trading is not a state: it is allowed in every state and never changes the
playback status.
"""

from ..errors import StateTransitionError
from ..logging.config import get_session_logger, log_state_transition
from .models import PlaybackState

state_logger = get_session_logger(__name__)

VALID_TRANSITIONS: dict[PlaybackState, frozenset[PlaybackState]] = {
    PlaybackState.IDLE: frozenset({PlaybackState.PLAYING, PlaybackState.IDLE}),
    PlaybackState.PLAYING: frozenset({PlaybackState.PAUSED, PlaybackState.IDLE}),
    PlaybackState.PAUSED: frozenset({PlaybackState.PLAYING, PlaybackState.IDLE}),
}


def can_transition(current: PlaybackState, target: PlaybackState) -> bool:
    return target in VALID_TRANSITIONS[current]


def transition(
    current: PlaybackState,
    target: PlaybackState,
    trigger: str,
    session_id: str
) -> PlaybackState:
    """
    Validate and log a playback transition.

    Args:
        current: Current playback state
        target: Requested playback state
        trigger: What requested the change (play, pause, end_of_data, reset)
        session_id: Active session, for the audit log

    Returns:
        The target state

    Raises:
        StateTransitionError: transition not in VALID_TRANSITIONS
    """
    if not can_transition(current, target):
        raise StateTransitionError(
            f"Cannot move from {current.value} to {target.value}",
            current_state=current.value,
            attempted_transition=f"{trigger}:{target.value}",
        )

    log_state_transition(
        state_logger,
        session_id=session_id,
        from_state=current.value,
        to_state=target.value,
        trigger=trigger,
    )
    return target
