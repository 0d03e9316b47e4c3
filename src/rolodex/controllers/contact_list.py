from __future__ import annotations

import logging
from typing import List

from rolodex.contacts.errors import ContactsError
from rolodex.contacts.model import Contact
from rolodex.controllers.base import ViewController
from rolodex.controllers.state import ViewState

logger = logging.getLogger(__name__)


class ContactListController(ViewController):
    """Loads the whole collection and filters it by name.

    A failed load leaves the list empty and records the error; nothing is
    raised to the view.
    """

    TAG = "ContactList"

    def __init__(self, repository, **kwargs):
        super().__init__(repository, **kwargs)
        self.contacts: List[Contact] = []
        self.filter_text = ""

    async def on_enter(self) -> None:
        if not self._can(ViewState.LOADING):
            logger.warning("[ContactList] Ignoring enter in state=%s", self.state.value)
            return

        generation = self._begin()
        self._transition(ViewState.LOADING, "enter")
        try:
            contacts = await self._repository.list_all()
        except ContactsError as exc:
            if self._is_stale(generation, "list_all"):
                return
            logger.warning("[ContactList] Load failed: %s", exc)
            self.error = exc
            self.contacts = []
            self._transition(ViewState.FAILED, "load_failed")
            return

        if self._is_stale(generation, "list_all"):
            return
        self.contacts = list(contacts)
        self.error = None
        self._transition(ViewState.READY, "loaded")

    def set_filter(self, text: str) -> None:
        self.filter_text = str(text or "")

    def visible_contacts(self) -> List[Contact]:
        return [c for c in self.contacts if c.matches(self.filter_text)]
