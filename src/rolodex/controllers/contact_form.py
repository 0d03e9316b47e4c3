"""Create and edit share one form controller.

The two modes differ only in how the draft is seeded and where a valid
draft is sent:

    CREATE: blank draft, POST, then the list view
    EDIT:   fetched draft, PUT (full record), then the contact's detail view
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Optional
from urllib.parse import quote

from rolodex.contacts.errors import ContactsError, ValidationError
from rolodex.contacts.model import Contact, ContactId, validate_draft
from rolodex.controllers.base import ViewController
from rolodex.controllers.state import ViewState

logger = logging.getLogger(__name__)


class FormMode(str, enum.Enum):
    CREATE = "create"
    EDIT = "edit"


class ContactFormController(ViewController):
    TAG = "ContactForm"

    def __init__(self, repository, mode: FormMode = FormMode.CREATE, **kwargs):
        super().__init__(repository, **kwargs)
        self.mode = FormMode(mode)
        self.draft = Contact.blank()
        self.contact_id: Optional[ContactId] = None
        self.validation_error: Optional[ValidationError] = None

    async def on_enter(self, contact_id: Optional[ContactId] = None) -> None:
        initial = ViewState.READY if self.mode is FormMode.CREATE else ViewState.LOADING
        if not self._can(initial):
            logger.warning("[ContactForm] Ignoring enter in state=%s", self.state.value)
            return

        if self.mode is FormMode.CREATE:
            self.draft = Contact.blank()
            self._transition(ViewState.READY, "enter")
            return

        if contact_id is None:
            raise ValueError("edit mode needs a contact id")

        generation = self._begin()
        self.contact_id = contact_id
        self._transition(ViewState.LOADING, "enter")
        try:
            contact = await self._repository.get_by_id(contact_id)
        except ContactsError as exc:
            if self._is_stale(generation, "get_by_id"):
                return
            logger.warning("[ContactForm] Fetch of %s failed: %s", contact_id, exc)
            self.error = exc
            self._transition(ViewState.FAILED, "load_failed")
            return

        if self._is_stale(generation, "get_by_id"):
            return
        self.draft = contact
        self.error = None
        self._transition(ViewState.READY, "loaded")

    def set_field(self, name: str, value: Any) -> None:
        """Replace one draft field. Coordinates are parsed, bad input is NaN."""
        if self._disposed:
            return
        self.draft = self.draft.with_field(name, value)

    async def submit(self) -> bool:
        if not self._can(ViewState.SUBMITTING):
            logger.warning("[ContactForm] Ignoring submit in state=%s", self.state.value)
            return False

        draft = self.draft
        try:
            validate_draft(draft)
        except ValidationError as exc:
            logger.info("[ContactForm] Draft rejected: %s", ", ".join(exc.fields))
            self.validation_error = exc
            return False
        self.validation_error = None

        generation = self._begin()
        self._transition(ViewState.SUBMITTING, f"submit_{self.mode.value}")
        try:
            if self.mode is FormMode.CREATE:
                created = await self._repository.create(draft)
            else:
                await self._repository.update(self.contact_id, draft)
        except ContactsError as exc:
            if self._is_stale(generation, self.mode.value):
                return False
            if isinstance(exc, ValidationError):
                self.validation_error = exc
            self._submit_failed(exc, self.mode.value)
            return False

        if self._is_stale(generation, self.mode.value):
            return False

        self.error = None
        if self.mode is FormMode.CREATE:
            logger.info("[ContactForm] Created contact %s", created.id)
            self._navigate("/", "created")
        else:
            logger.info("[ContactForm] Updated contact %s", self.contact_id)
            self._navigate(f"/contact/{quote(str(self.contact_id), safe='')}", "updated")
        return True
