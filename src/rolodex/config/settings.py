"""Runtime configuration for the contact client.

Config env vars::

    ROLODEX_RESOURCE_BASE=https://example.test/alice/contact   (wins if set)
    ROLODEX_API_BASE=https://boolean-uk-api-server.fly.dev
    ROLODEX_USERNAME=username
    ROLODEX_TIMEOUT_S=10        (unset = no timeout)
    ROLODEX_AUDIT_LOG=artifacts/logs/rolodex.requests.jsonl
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

__all__ = [
    "ContactsConfig",
    "DEFAULT_API_BASE",
    "DEFAULT_USERNAME",
]

DEFAULT_API_BASE = "https://boolean-uk-api-server.fly.dev"
DEFAULT_USERNAME = "username"


@dataclass
class ContactsConfig:
    """Where the contact store lives and how to talk to it.

    Attributes
    ----------
    api_base:
        Scheme and host of the contact API.
    username:
        Per-user path segment; the store keeps one collection per user.
    resource_base:
        Explicit collection URL. Overrides ``api_base``/``username``.
    timeout_seconds:
        Request timeout. ``None`` leaves requests unbounded.
    audit_log_path:
        Optional JSONL file receiving one line per request.
    """

    api_base: str = DEFAULT_API_BASE
    username: str = DEFAULT_USERNAME
    resource_base: Optional[str] = None
    timeout_seconds: Optional[float] = None
    audit_log_path: Optional[str] = None

    @property
    def contacts_url(self) -> str:
        if self.resource_base:
            return self.resource_base.rstrip("/")
        base = (self.api_base or DEFAULT_API_BASE).rstrip("/")
        user = (self.username or DEFAULT_USERNAME).strip("/")
        return f"{base}/{user}/contact"

    @classmethod
    def from_env(cls) -> "ContactsConfig":
        """Load config from environment variables."""
        def _str(name: str) -> Optional[str]:
            raw = os.getenv(name, "").strip()
            return raw or None

        def _float(name: str) -> Optional[float]:
            raw = os.getenv(name, "").strip()
            if not raw:
                return None
            try:
                value = float(raw)
            except ValueError:
                return None
            return value if value > 0 else None

        return cls(
            api_base=_str("ROLODEX_API_BASE") or DEFAULT_API_BASE,
            username=_str("ROLODEX_USERNAME") or DEFAULT_USERNAME,
            resource_base=_str("ROLODEX_RESOURCE_BASE"),
            timeout_seconds=_float("ROLODEX_TIMEOUT_S"),
            audit_log_path=_str("ROLODEX_AUDIT_LOG"),
        )
