"""Tiny .env reader for the ``ROLODEX_*`` settings.

Only keys that ``ContactsConfig.from_env`` understands are applied, so a
shared project .env cannot leak unrelated variables into the process.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)

ENV_PREFIX = "ROLODEX_"


def _unquote(value: str) -> str:
    v = value.strip()
    if len(v) >= 2 and v[0] == v[-1] and v[0] in {'"', "'"}:
        return v[1:-1]
    # Unquoted values may carry a trailing comment
    if " #" in v:
        v = v.split(" #", 1)[0].rstrip()
    return v


def iter_env_pairs(lines: Iterable[str]) -> Iterator[tuple[str, str]]:
    """Yield ``(key, value)`` for each ``KEY=VALUE`` or ``export KEY=VALUE`` line."""
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        yield key, _unquote(value)


def load_env_file(path: str | os.PathLike[str], *, override: bool = False) -> list[str]:
    """Apply ``ROLODEX_*`` assignments from ``path`` to ``os.environ``.

    Existing variables win unless ``override`` is set. Values are never
    logged. Returns the keys that were applied, in file order.
    """
    p = Path(path).expanduser()
    if not p.is_file():
        return []

    applied: list[str] = []
    for key, value in iter_env_pairs(p.read_text(encoding="utf-8").splitlines()):
        if not key.startswith(ENV_PREFIX):
            logger.warning("[Config] Skipping non-%s key in %s: %s", ENV_PREFIX, p.name, key)
            continue
        if key in os.environ and not override:
            continue
        os.environ[key] = value
        applied.append(key)

    if applied:
        logger.debug("[Config] Loaded %d setting(s) from %s", len(applied), p)
    return applied


def load_env(
    *,
    env_var: str = "ROLODEX_ENV_FILE",
    default_files: Iterable[str] = (".env",),
    override: bool = False,
) -> list[str]:
    """Load settings from ``$ROLODEX_ENV_FILE`` or the first usable default file."""
    explicit = (os.getenv(env_var) or "").strip()
    if explicit:
        return load_env_file(explicit, override=override)

    for name in default_files:
        keys = load_env_file(name, override=override)
        if keys:
            return keys
    return []
