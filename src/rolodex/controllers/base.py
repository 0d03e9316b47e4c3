"""Per-view controller lifecycle.

Every controller instance belongs to one view-entry. Requests are tagged
with the generation that issued them; a result that comes back after the
generation moved on (a newer load, or ``dispose()`` when the user left the
view) is dropped without touching state.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Protocol

from rolodex.contacts.errors import ContactsError
from rolodex.contacts.model import Contact, ContactId
from rolodex.controllers.state import (
    InvalidTransitionError,
    StateTransition,
    ViewState,
    can_transition,
)

logger = logging.getLogger(__name__)


class ContactStore(Protocol):
    """What controllers need from a repository."""

    async def list_all(self) -> List[Contact]:
        ...

    async def get_by_id(self, contact_id: ContactId) -> Contact:
        ...

    async def create(self, draft: Contact) -> Contact:
        ...

    async def update(self, contact_id: ContactId, draft: Contact) -> None:
        ...

    async def delete_by_id(self, contact_id: ContactId) -> None:
        ...


class ViewController:
    """Shared state handling for the list, detail and form controllers.

    Parameters
    ----------
    repository:
        Contact store the controller reads from and writes to.
    clock:
        Optional clock function for testing. Defaults to time.monotonic.
    """

    TAG = "View"

    def __init__(
        self,
        repository: ContactStore,
        *,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._repository = repository
        self._clock = clock or time.monotonic
        self._state = ViewState.UNLOADED
        self._generation = 0
        self._disposed = False
        self._history: List[StateTransition] = []

        self.error: Optional[ContactsError] = None
        self.navigation: Optional[str] = None

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def history(self) -> List[StateTransition]:
        return list(self._history)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Detach from the view. Late results for this instance become no-ops."""
        if not self._disposed:
            self._disposed = True
            self._generation += 1
            logger.debug("[%s] disposed in state=%s", self.TAG, self._state.value)

    # ── helpers for subclasses ───────────────────────────────────

    def _begin(self) -> int:
        self._generation += 1
        return self._generation

    def _is_stale(self, generation: int, operation: str) -> bool:
        if self._disposed or generation != self._generation:
            logger.debug(
                "[%s] Dropping stale %s result (gen=%d current=%d disposed=%s)",
                self.TAG,
                operation,
                generation,
                self._generation,
                self._disposed,
            )
            return True
        return False

    def _can(self, to_state: ViewState) -> bool:
        return not self._disposed and can_transition(self._state, to_state)

    def _transition(self, to_state: ViewState, trigger: str) -> None:
        if not can_transition(self._state, to_state):
            raise InvalidTransitionError(self._state, to_state)
        self._history.append(
            StateTransition(
                from_state=self._state,
                to_state=to_state,
                trigger=trigger,
                timestamp=self._clock(),
            )
        )
        logger.debug(
            "[%s] %s -> %s (%s)", self.TAG, self._state.value, to_state.value, trigger
        )
        self._state = to_state

    def _navigate(self, path: str, trigger: str) -> None:
        self.navigation = path
        self._transition(ViewState.NAVIGATED, trigger)

    def _submit_failed(self, exc: ContactsError, action: str) -> None:
        logger.warning("[%s] %s failed: %s", self.TAG, action, exc)
        self.error = exc
        self._transition(ViewState.SUBMIT_FAILED, f"{action}_failed")
        self._transition(ViewState.READY, "retry_allowed")
