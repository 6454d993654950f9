"""Logging helpers for the Vessel backend."""

from __future__ import annotations

import os
from typing import Any

from .config import CACHE_FOLDER
from .utils import now_iso


def _read_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    return normalized in {"1", "true", "yes", "on"}


DEBUG = _read_flag("VESSEL_SERVER_DEBUG", False)
VERBOSE = _read_flag("VESSEL_SERVER_VERBOSE", True)


LOG_FILE = os.path.join(CACHE_FOLDER, "logs.txt")


def _emit(prefix: str, label: str, payload: Any) -> None:
    os.makedirs(CACHE_FOLDER, exist_ok=True)
    with open(LOG_FILE, "a", encoding="utf-8", errors="replace") as log_file:
        log_file.write(f"[{prefix}][{now_iso()}] {label}: {payload}\n")


def verbose_log(label: str, payload: Any) -> None:
    """Emit structured logs when verbose mode is enabled."""
    if not VERBOSE:
        return
    _emit("VERBOSE", label, payload)


def debug_verbose(label: str, payload: Any) -> None:
    """Emit debug logs when debug mode is active."""
    if not DEBUG:
        return
    _emit("DEBUG", label, payload)


__all__ = ["DEBUG", "VERBOSE", "LOG_FILE", "verbose_log", "debug_verbose"]
