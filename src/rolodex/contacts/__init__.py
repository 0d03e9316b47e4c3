"""Contact records and the remote store they live in.

No contact data is kept locally: every view re-fetches from the store.
"""

from __future__ import annotations

from .errors import ContactsError, NotFoundError, TransportError, ValidationError
from .model import (
    NUMERIC_FIELDS,
    TEXT_FIELDS,
    WIRE_NAMES,
    Contact,
    ContactId,
    missing_fields,
    normalize_field_name,
    parse_coordinate,
    validate_draft,
)
from .repository import ContactRepository

__all__ = [
    "Contact",
    "ContactId",
    "ContactRepository",
    "ContactsError",
    "NotFoundError",
    "TransportError",
    "ValidationError",
    "NUMERIC_FIELDS",
    "TEXT_FIELDS",
    "WIRE_NAMES",
    "missing_fields",
    "normalize_field_name",
    "parse_coordinate",
    "validate_draft",
]
