"""
View state machine shared by every contact controller.

One controller instance lives for exactly one view-entry. Its states:

- UNLOADED: created, nothing requested yet
- LOADING: waiting for the store to answer the initial fetch
- READY: data on screen, accepting edits and actions
- FAILED: initial fetch failed; the view stays as it was
- SUBMITTING: waiting for a create/update/delete to finish
- SUBMIT_FAILED: the store refused or was unreachable; goes back to READY
- NAVIGATED: action succeeded and the view asked to move on (final)
"""

from dataclasses import dataclass
from enum import Enum


class ViewState(Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"
    SUBMITTING = "submitting"
    SUBMIT_FAILED = "submit_failed"
    NAVIGATED = "navigated"


# Valid state transitions
TRANSITIONS: dict[ViewState, list[ViewState]] = {
    ViewState.UNLOADED: [ViewState.LOADING, ViewState.READY],
    ViewState.LOADING: [ViewState.LOADING, ViewState.READY, ViewState.FAILED],
    ViewState.READY: [ViewState.LOADING, ViewState.SUBMITTING],
    ViewState.FAILED: [ViewState.LOADING],
    ViewState.SUBMITTING: [
        ViewState.READY,
        ViewState.NAVIGATED,
        ViewState.SUBMIT_FAILED,
    ],
    ViewState.SUBMIT_FAILED: [ViewState.READY],
    ViewState.NAVIGATED: [],  # final state
}


class InvalidTransitionError(Exception):
    """Raised when a controller attempts an illegal state change."""

    def __init__(self, from_state: ViewState, to_state: ViewState):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid transition: {from_state.value} -> {to_state.value}"
        )


def can_transition(from_state: ViewState, to_state: ViewState) -> bool:
    return to_state in TRANSITIONS.get(from_state, [])


@dataclass
class StateTransition:
    """Record of a state transition."""

    from_state: ViewState
    to_state: ViewState
    trigger: str
    timestamp: float = 0.0
