from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


@dataclass
class JsonlLogger:
    path: str

    def _append(self, record: dict[str, Any]) -> None:
        p = Path(self.path)
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")

    def log_request(
        self,
        method: str,
        url: str,
        *,
        ok: bool,
        status: Optional[int] = None,
        elapsed_ms: Optional[int] = None,
        error: str | None = None,
        **extra_fields: Any,
    ) -> None:
        """Append one contact-store request to the audit log.

        Args:
            method: HTTP method
            url: Request URL
            ok: Whether the request succeeded
            status: HTTP status, if a response arrived
            elapsed_ms: Wall time of the request
            error: Error message if failed
            **extra_fields: Additional audit fields
        """
        record: dict[str, Any] = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            "event_type": "contact_request",
            "method": method,
            "url": url,
            "ok": ok,
        }
        if status is not None:
            record["status"] = status
        if elapsed_ms is not None:
            record["elapsed_ms"] = elapsed_ms
        if error:
            record["error"] = error
        record.update(extra_fields)
        self._append(record)
