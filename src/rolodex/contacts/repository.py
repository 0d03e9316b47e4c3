"""Remote contact store client.

``ContactRepository`` is the only component that talks to the network.
Each operation issues exactly one request: no retries, no deduplication,
no caching.

Resource layout (``base`` is injected, never a module constant)::

    GET    {base}        -> [Contact, ...]
    GET    {base}/{id}   -> Contact
    POST   {base}        -> Contact (with store-assigned id)
    PUT    {base}/{id}   -> ignored
    DELETE {base}/{id}   -> ignored
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
import time
from typing import Any, List, Optional
from urllib.parse import quote

import requests

from rolodex.config.settings import ContactsConfig
from rolodex.contacts.errors import (
    ContactsError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from rolodex.contacts.model import Contact, ContactId
from rolodex.logs.logger import JsonlLogger

logger = logging.getLogger(__name__)

__all__ = ["ContactRepository"]

VALIDATION_STATUS_CODES = {400, 422}


class ContactRepository:
    """Async facade over the remote contact resource.

    The blocking ``requests`` call runs in a worker thread so the event loop
    driving the controllers is never blocked.

    Example::

        repo = ContactRepository("https://api.example.test/alice/contact")
        contacts = await repo.list_all()
    """

    def __init__(
        self,
        resource_base: str,
        *,
        session: Optional[requests.Session] = None,
        timeout_seconds: Optional[float] = None,
        audit_log: Optional[JsonlLogger] = None,
    ):
        base = (resource_base or "").strip()
        if not base:
            raise ValueError("resource_base must be non-empty")
        self._base_url = base.rstrip("/")
        # An injected session is shared as-is; otherwise each worker thread
        # gets its own, since requests.Session is not thread-safe.
        self._session = session
        self._local = threading.local()
        self._owned_sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()
        self._timeout_seconds = float(timeout_seconds) if timeout_seconds else None
        self._audit_log = audit_log

    @classmethod
    def from_config(cls, config: ContactsConfig) -> "ContactRepository":
        audit = JsonlLogger(config.audit_log_path) if config.audit_log_path else None
        return cls(
            config.contacts_url,
            timeout_seconds=config.timeout_seconds,
            audit_log=audit,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        with self._sessions_lock:
            owned, self._owned_sessions = self._owned_sessions, []
        for s in owned:
            s.close()
        if self._session is not None:
            self._session.close()

    def _thread_session(self) -> requests.Session:
        if self._session is not None:
            return self._session
        s = getattr(self._local, "session", None)
        if s is None:
            s = requests.Session()
            self._local.session = s
            with self._sessions_lock:
                self._owned_sessions.append(s)
        return s

    # ── operations ───────────────────────────────────────────────

    async def list_all(self) -> List[Contact]:
        data = await self._call("GET", self._base_url)
        if not isinstance(data, list):
            raise TransportError("Contacts invalid_response reason=expected_list")
        return [Contact.from_dict(item) for item in data if isinstance(item, dict)]

    async def get_by_id(self, contact_id: ContactId) -> Contact:
        data = await self._call("GET", self._item_url(contact_id))
        return self._parse_record(data)

    async def create(self, draft: Contact) -> Contact:
        data = await self._call("POST", self._base_url, body=draft.to_dict(include_id=False))
        created = self._parse_record(data)
        if created.id is None:
            raise TransportError("Contacts invalid_response reason=missing_id")
        return created

    async def update(self, contact_id: ContactId, draft: Contact) -> None:
        # Full-record replacement: every attribute is sent, blanks included.
        await self._call(
            "PUT",
            self._item_url(contact_id),
            body=draft.to_dict(include_id=False),
            expect_body=False,
        )

    async def delete_by_id(self, contact_id: ContactId) -> None:
        # Deleting an already-deleted record counts as success.
        try:
            await self._call("DELETE", self._item_url(contact_id), expect_body=False)
        except NotFoundError:
            logger.debug("[Contacts] Contact %s already gone", contact_id)

    # ── internal ─────────────────────────────────────────────────

    def _item_url(self, contact_id: ContactId) -> str:
        key = str(contact_id if contact_id is not None else "").strip()
        if not key:
            raise ValueError("contact id must be non-empty")
        return f"{self._base_url}/{quote(key, safe='')}"

    @staticmethod
    def _parse_record(data: Any) -> Contact:
        if not isinstance(data, dict):
            raise TransportError("Contacts invalid_response reason=expected_object")
        return Contact.from_dict(data)

    async def _call(
        self,
        method: str,
        url: str,
        *,
        body: Optional[dict[str, Any]] = None,
        expect_body: bool = True,
    ) -> Any:
        return await asyncio.to_thread(
            self._request, method, url, body=body, expect_body=expect_body
        )

    def _request(
        self,
        method: str,
        url: str,
        *,
        body: Optional[dict[str, Any]] = None,
        expect_body: bool = True,
    ) -> Any:
        headers = {"Accept": "application/json"}
        data = None
        if body is not None:
            headers["Content-Type"] = "application/json"
            data = json.dumps(body, ensure_ascii=False).encode("utf-8")

        t0 = time.perf_counter()
        try:
            r = self._thread_session().request(
                method,
                url,
                headers=headers,
                data=data,
                timeout=self._timeout_seconds,
            )
        except requests.Timeout as e:
            self._audit(method, url, ok=False, t0=t0, error="timeout")
            raise TransportError(
                f"Contacts timeout method={method} reason=timeout "
                f"timeout_s={self._timeout_seconds}"
            ) from e
        except requests.RequestException as e:
            self._audit(method, url, ok=False, t0=t0, error="connection_error")
            raise TransportError(
                f"Contacts connection_error method={method} reason=connection_error"
            ) from e

        status = r.status_code
        elapsed_ms = int((time.perf_counter() - t0) * 1000)
        logger.debug(
            "[Contacts] %s %s status=%d latency_ms=%d", method, url, status, elapsed_ms
        )

        try:
            if status == 404:
                raise NotFoundError(
                    f"Contacts not_found method={method} status=404 reason=not_found",
                    status=status,
                )
            if status in VALIDATION_STATUS_CODES:
                raise ValidationError(
                    f"Contacts rejected method={method} status={status} reason=rejected",
                    status=status,
                )
            if not 200 <= status < 300:
                raise TransportError(
                    f"Contacts http_error method={method} status={status} reason=http_error",
                    status=status,
                )

            if not expect_body:
                self._audit(method, url, ok=True, t0=t0, status=status)
                return None

            try:
                payload = r.json()
            except ValueError as e:
                raise TransportError(
                    f"Contacts parse_error method={method} status={status} reason=parse_error",
                    status=status,
                ) from e
        except ContactsError as exc:
            self._audit(method, url, ok=False, t0=t0, status=status, error=str(exc))
            raise

        self._audit(method, url, ok=True, t0=t0, status=status)
        return payload

    def _audit(
        self,
        method: str,
        url: str,
        *,
        ok: bool,
        t0: float,
        status: Optional[int] = None,
        error: Optional[str] = None,
    ) -> None:
        if self._audit_log is None:
            return
        try:
            self._audit_log.log_request(
                method,
                url,
                ok=ok,
                status=status,
                elapsed_ms=int((time.perf_counter() - t0) * 1000),
                error=error,
            )
        except OSError as exc:
            logger.warning("[Contacts] Audit log write failed: %s", exc)
