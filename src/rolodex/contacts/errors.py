"""Contact store error taxonomy.

Every failure raised by ``ContactRepository`` is a ``ContactsError``.
Controllers catch these at the call site; nothing here is expected to reach
the view layer.
"""

from __future__ import annotations

from typing import Iterable, Optional


class ContactsError(Exception):
    """Base exception for contact store errors."""
    pass


class TransportError(ContactsError):
    """Network failure or non-success response from the remote store."""

    def __init__(self, message: str, *, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class NotFoundError(TransportError):
    """The store has no record for the requested identifier."""
    pass


class ValidationError(ContactsError):
    """A draft was rejected, either before submission or by the store."""

    def __init__(
        self,
        message: str,
        *,
        fields: Iterable[str] = (),
        status: Optional[int] = None,
    ):
        super().__init__(message)
        self.fields = tuple(fields)
        self.status = status
