"""LOGSMITH FILE PURPOSE
Purpose: environment configuration helpers (safe defaults).
Hot path: yes (read-only env lookups; lightweight).
Feature flags: LOGSMITH_DEBUG, LOGSMITH_FEATURE_*.
Failure mode: safe defaults when unset.
"""

from __future__ import annotations

import os

DEFAULT_DB_PATH = "ops/logsmith.sqlite3"
DEFAULT_SETTINGS_NAME = "Default"
DEFAULT_CLEANUP_CHUNK_SIZE = 200
MAX_CLEANUP_CHUNK_SIZE = 2000


def env_flag(name: str, default: str = "0") -> bool:
    v = (os.getenv(name) or default).strip().lower()
    return v in ("1", "true", "yes", "on")


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def is_debug() -> bool:
    return env_flag("LOGSMITH_DEBUG", "0")


def db_path() -> str:
    return os.getenv("LOGSMITH_DB_PATH", DEFAULT_DB_PATH)


def settings_name() -> str:
    name = (os.getenv("LOGSMITH_SETTINGS_NAME") or "").strip()
    return name or DEFAULT_SETTINGS_NAME


def cleanup_chunk_size() -> int:
    size = env_int("LOGSMITH_CLEANUP_CHUNK_SIZE", DEFAULT_CLEANUP_CHUNK_SIZE)
    return max(1, min(size, MAX_CLEANUP_CHUNK_SIZE))
