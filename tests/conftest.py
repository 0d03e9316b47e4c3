from __future__ import annotations

import asyncio
import json
import socket
import threading
import time
from dataclasses import replace
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Iterable, Optional

import pytest

from rolodex.contacts.errors import ContactsError, NotFoundError, TransportError
from rolodex.contacts.model import Contact


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run tests marked with @pytest.mark.integration (live contact store).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-integration"):
        return

    deselected: list[pytest.Item] = []
    selected: list[pytest.Item] = []
    for item in items:
        if item.get_closest_marker("integration"):
            deselected.append(item)
            continue
        selected.append(item)

    if deselected:
        config.hook.pytest_deselected(items=deselected)
        items[:] = selected


# ─────────────────────────────────────────────────────────────────
# In-memory repository double
# ─────────────────────────────────────────────────────────────────


class FakeContactStore:
    """Async stand-in for ContactRepository.

    - ``calls`` records every operation with its arguments
    - ``fail(op)`` makes every later ``op`` raise
    - ``hold(op)`` parks the *next* ``op`` call until the returned event is set
    """

    def __init__(self, contacts: Iterable[Contact] = ()):
        self.records: dict[str, Contact] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.failures: dict[str, ContactsError] = {}
        self._holds: dict[str, list[asyncio.Event]] = {}
        self._next_id = 1
        for contact in contacts:
            self.add(contact)

    def add(self, contact: Contact) -> Contact:
        if contact.id is None:
            contact = replace(contact, id=self._next_id)
            self._next_id += 1
        self.records[str(contact.id)] = contact
        return contact

    def fail(self, op: str, exc: Optional[ContactsError] = None) -> None:
        self.failures[op] = exc or TransportError(f"{op} failed")

    def recover(self, op: str) -> None:
        self.failures.pop(op, None)

    def hold(self, op: str) -> asyncio.Event:
        gate = asyncio.Event()
        self._holds.setdefault(op, []).append(gate)
        return gate

    def calls_to(self, op: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == op]

    async def _enter(self, op: str, *args: Any) -> None:
        self.calls.append((op, *args))
        pending = self._holds.get(op)
        if pending:
            await pending.pop(0).wait()
        exc = self.failures.get(op)
        if exc is not None:
            raise exc

    async def list_all(self) -> list[Contact]:
        await self._enter("list_all")
        return list(self.records.values())

    async def get_by_id(self, contact_id) -> Contact:
        await self._enter("get_by_id", contact_id)
        try:
            return self.records[str(contact_id)]
        except KeyError:
            raise NotFoundError(f"no contact {contact_id}", status=404) from None

    async def create(self, draft: Contact) -> Contact:
        await self._enter("create", draft)
        return self.add(replace(draft, id=None))

    async def update(self, contact_id, draft: Contact) -> None:
        await self._enter("update", contact_id, draft)
        existing = self.records.get(str(contact_id))
        if existing is None:
            raise NotFoundError(f"no contact {contact_id}", status=404)
        self.records[str(contact_id)] = replace(draft, id=existing.id)

    async def delete_by_id(self, contact_id) -> None:
        await self._enter("delete_by_id", contact_id)
        self.records.pop(str(contact_id), None)


def make_contact(**overrides: Any) -> Contact:
    values: dict[str, Any] = {
        "first_name": "Grace",
        "last_name": "Hopper",
        "street": "1 Main St",
        "city": "Arlington",
        "email": "g@h.com",
        "phone": "555-1234",
        "latitude": 38.8,
        "longitude": -77.1,
    }
    values.update(overrides)
    return Contact(**values)


@pytest.fixture
def contact_factory():
    return make_contact


@pytest.fixture
def fake_store() -> FakeContactStore:
    return FakeContactStore(
        [
            make_contact(first_name="Ada", last_name="Lovelace", city="London"),
            make_contact(first_name="Alan", last_name="Turing", city="Wilmslow"),
            make_contact(first_name="Grace", last_name="Hopper"),
        ]
    )


@pytest.fixture
def empty_store() -> FakeContactStore:
    return FakeContactStore()


# ─────────────────────────────────────────────────────────────────
# Local HTTP contact store
# ─────────────────────────────────────────────────────────────────

CONTACT_STORE_PREFIX = "/alice/contact"


class _ContactStoreHandler(BaseHTTPRequestHandler):
    server_version = "rolodex-store-mock/1.0"

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A003
        # Keep pytest output clean.
        return

    def _send_json(self, status: int, payload: Any = None) -> None:
        data = json.dumps(payload if payload is not None else {}).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def _read_json(self) -> Any:
        length = int(self.headers.get("Content-Length", "0") or "0")
        raw = self.rfile.read(length) if length > 0 else b""
        return json.loads(raw.decode("utf-8")) if raw else None

    def _target(self) -> tuple[bool, Optional[str]]:
        path = self.path.split("?", 1)[0].rstrip("/")
        if path == CONTACT_STORE_PREFIX:
            return True, None
        if path.startswith(CONTACT_STORE_PREFIX + "/"):
            rest = path[len(CONTACT_STORE_PREFIX) + 1 :]
            if rest and "/" not in rest:
                return True, rest
        return False, None

    @property
    def _store(self) -> dict[str, dict[str, Any]]:
        return self.server.contacts  # type: ignore[attr-defined]

    def do_GET(self) -> None:  # noqa: N802
        matched, contact_id = self._target()
        if not matched:
            self._send_json(404, {"error": "not found"})
            return
        with self.server.lock:  # type: ignore[attr-defined]
            if contact_id is None:
                self._send_json(200, list(self._store.values()))
                return
            record = self._store.get(contact_id)
        if record is None:
            self._send_json(404, {"error": "contact not found"})
            return
        self._send_json(200, record)

    def do_POST(self) -> None:  # noqa: N802
        matched, contact_id = self._target()
        if not matched or contact_id is not None:
            self._send_json(404, {"error": "not found"})
            return
        try:
            body = self._read_json()
        except ValueError:
            self._send_json(400, {"error": "invalid json"})
            return
        if not isinstance(body, dict) or not body.get("firstName"):
            self._send_json(400, {"error": "firstName is required"})
            return
        with self.server.lock:  # type: ignore[attr-defined]
            new_id = self.server.next_id  # type: ignore[attr-defined]
            self.server.next_id += 1  # type: ignore[attr-defined]
            record = {**body, "id": new_id}
            self._store[str(new_id)] = record
        self._send_json(201, record)

    def do_PUT(self) -> None:  # noqa: N802
        matched, contact_id = self._target()
        if not matched or contact_id is None:
            self._send_json(404, {"error": "not found"})
            return
        try:
            body = self._read_json()
        except ValueError:
            self._send_json(400, {"error": "invalid json"})
            return
        with self.server.lock:  # type: ignore[attr-defined]
            existing = self._store.get(contact_id)
            if existing is None:
                self._send_json(404, {"error": "contact not found"})
                return
            record = {**(body or {}), "id": existing["id"]}
            self._store[contact_id] = record
            self.server.put_bodies.append(body)  # type: ignore[attr-defined]
        self._send_json(200, record)

    def do_DELETE(self) -> None:  # noqa: N802
        matched, contact_id = self._target()
        if not matched or contact_id is None:
            self._send_json(404, {"error": "not found"})
            return
        with self.server.lock:  # type: ignore[attr-defined]
            record = self._store.pop(contact_id, None)
        if record is None:
            self._send_json(404, {"error": "contact not found"})
            return
        self._send_json(200, record)


@pytest.fixture
def contact_store_server():
    """Start a tiny contact store speaking the remote resource protocol."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _ContactStoreHandler)
    server.contacts = {}  # type: ignore[attr-defined]
    server.next_id = 1  # type: ignore[attr-defined]
    server.lock = threading.Lock()  # type: ignore[attr-defined]
    server.put_bodies = []  # type: ignore[attr-defined]

    host, port = server.server_address
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    # Basic readiness check
    deadline = time.time() + 5.0
    while time.time() < deadline:
        try:
            with socket.create_connection((host, port), timeout=0.2):
                break
        except OSError:
            time.sleep(0.05)
    else:
        server.shutdown()
        raise RuntimeError("Failed to start contact store mock server")

    server.url = f"http://{host}:{port}{CONTACT_STORE_PREFIX}"  # type: ignore[attr-defined]
    yield server

    server.shutdown()
    server.server_close()
