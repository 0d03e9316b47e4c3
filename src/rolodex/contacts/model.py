from __future__ import annotations

import math
import re
from dataclasses import dataclass, fields, replace
from typing import Any, Optional, Union

from rolodex.contacts.errors import ValidationError


ContactId = Union[int, str]

# Python attribute -> wire name
WIRE_NAMES: dict[str, str] = {
    "first_name": "firstName",
    "last_name": "lastName",
    "street": "street",
    "city": "city",
    "email": "email",
    "phone": "phone",
    "latitude": "latitude",
    "longitude": "longitude",
}

TEXT_FIELDS = ("first_name", "last_name", "street", "city", "email", "phone")
NUMERIC_FIELDS = ("latitude", "longitude")

_BY_WIRE_NAME = {wire: attr for attr, wire in WIRE_NAMES.items()}

# Leading numeric prefix, the way a browser's parseFloat reads it.
_FLOAT_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INFINITY_PREFIX = re.compile(r"[+-]?Infinity")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+$")


def normalize_field_name(name: str) -> str:
    """Map a wire or Python field name to the Python attribute name."""
    key = str(name or "").strip()
    if key in WIRE_NAMES:
        return key
    if key in _BY_WIRE_NAME:
        return _BY_WIRE_NAME[key]
    raise ValueError(f"unknown contact field: {name!r}")


def parse_coordinate(value: Any) -> float:
    """Parse form input into a float; unparseable input becomes NaN."""
    if isinstance(value, bool):
        return float("nan")
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value or "").strip()
    if _INFINITY_PREFIX.match(text):
        return float("-inf") if text.startswith("-") else float("inf")
    m = _FLOAT_PREFIX.match(text)
    if not m:
        return float("nan")
    return float(m.group(0))


def _text(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw)


def _coordinate(raw: Any) -> float:
    if raw is None or raw == "":
        return 0.0
    return parse_coordinate(raw)


@dataclass(frozen=True)
class Contact:
    """A contact record as held by the client.

    ``id`` is assigned by the remote store and stays ``None`` for drafts.
    """

    first_name: str = ""
    last_name: str = ""
    street: str = ""
    city: str = ""
    email: str = ""
    phone: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    id: Optional[ContactId] = None

    @classmethod
    def blank(cls) -> "Contact":
        """Zero-value draft used to seed the create form."""
        return cls()

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Contact":
        if not isinstance(payload, dict):
            raise TypeError("contact payload must be a JSON object")
        values: dict[str, Any] = {}
        for attr, wire in WIRE_NAMES.items():
            raw = payload.get(wire)
            values[attr] = _coordinate(raw) if attr in NUMERIC_FIELDS else _text(raw)
        return cls(id=payload.get("id"), **values)

    def to_dict(self, *, include_id: bool = True) -> dict[str, Any]:
        out: dict[str, Any] = {wire: getattr(self, attr) for attr, wire in WIRE_NAMES.items()}
        if include_id and self.id is not None:
            out = {"id": self.id, **out}
        return out

    def with_field(self, name: str, value: Any) -> "Contact":
        """Return a copy with exactly one field replaced."""
        attr = normalize_field_name(name)
        if attr in NUMERIC_FIELDS:
            return replace(self, **{attr: parse_coordinate(value)})
        return replace(self, **{attr: _text(value)})

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def matches(self, needle: str) -> bool:
        """Case-insensitive substring match on first or last name."""
        folded = str(needle or "").casefold()
        return folded in self.first_name.casefold() or folded in self.last_name.casefold()


def missing_fields(draft: Contact) -> list[str]:
    """Names of the fields that fail client-side validation, in form order."""
    failing: list[str] = []
    for f in fields(draft):
        attr = f.name
        if attr in TEXT_FIELDS:
            value = getattr(draft, attr).strip()
            if not value:
                failing.append(attr)
            elif attr == "email" and not _EMAIL.match(value):
                failing.append(attr)
        elif attr in NUMERIC_FIELDS:
            if not math.isfinite(getattr(draft, attr)):
                failing.append(attr)
    return failing


def validate_draft(draft: Contact) -> None:
    """Raise ``ValidationError`` if the draft cannot be submitted."""
    failing = missing_fields(draft)
    if failing:
        raise ValidationError(
            "contact draft is incomplete: " + ", ".join(failing),
            fields=failing,
        )
