"""Configuration: environment-driven settings and .env loading."""

from __future__ import annotations

from .env_loader import load_env, load_env_file
from .settings import DEFAULT_API_BASE, DEFAULT_USERNAME, ContactsConfig

__all__ = [
    "ContactsConfig",
    "DEFAULT_API_BASE",
    "DEFAULT_USERNAME",
    "load_env",
    "load_env_file",
]
