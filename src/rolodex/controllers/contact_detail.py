from __future__ import annotations

import logging
from typing import Optional

from rolodex.contacts.errors import ContactsError
from rolodex.contacts.model import Contact, ContactId
from rolodex.controllers.base import ViewController
from rolodex.controllers.state import ViewState
from rolodex.maps.view import MapView

logger = logging.getLogger(__name__)


class ContactDetailController(ViewController):
    """One contact, its map, and the delete action.

    A failed fetch leaves the contact unloaded for good; the view keeps
    showing its loading indicator.
    """

    TAG = "ContactDetail"

    def __init__(self, repository, **kwargs):
        super().__init__(repository, **kwargs)
        self.contact: Optional[Contact] = None
        self.contact_id: Optional[ContactId] = None

    @property
    def loaded(self) -> bool:
        return self.contact is not None

    async def on_enter(self, contact_id: ContactId) -> None:
        if not self._can(ViewState.LOADING):
            logger.warning("[ContactDetail] Ignoring enter in state=%s", self.state.value)
            return

        generation = self._begin()
        self.contact_id = contact_id
        self.contact = None
        self._transition(ViewState.LOADING, "enter")
        try:
            contact = await self._repository.get_by_id(contact_id)
        except ContactsError as exc:
            if self._is_stale(generation, "get_by_id"):
                return
            logger.warning("[ContactDetail] Fetch of %s failed: %s", contact_id, exc)
            self.error = exc
            self._transition(ViewState.FAILED, "load_failed")
            return

        if self._is_stale(generation, "get_by_id"):
            return
        self.contact = contact
        self.error = None
        self._transition(ViewState.READY, "loaded")

    async def delete(self) -> bool:
        """Delete the loaded contact; on success ask to go back to the list."""
        contact = self.contact
        if contact is None or not self._can(ViewState.SUBMITTING):
            logger.warning("[ContactDetail] Delete requires a loaded contact")
            return False

        target = contact.id if contact.id is not None else self.contact_id
        generation = self._begin()
        self._transition(ViewState.SUBMITTING, "delete")
        try:
            await self._repository.delete_by_id(target)
        except ContactsError as exc:
            if self._is_stale(generation, "delete_by_id"):
                return False
            self._submit_failed(exc, "delete")
            return False

        if self._is_stale(generation, "delete_by_id"):
            return False
        logger.info("[ContactDetail] Deleted contact %s", target)
        self._navigate("/", "deleted")
        return True

    def map_view(self) -> Optional[MapView]:
        if self.contact is None:
            return None
        return MapView.for_contact(self.contact)
