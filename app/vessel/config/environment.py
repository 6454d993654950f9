from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict

_TEMP_ROOT = os.path.join(tempfile.gettempdir(), "vessel")

_DEFAULTS: Dict[str, str] = {
    "VESSEL_SERVER_NAME": "Vessel Upload Service",
    "VESSEL_SERVER_DESCRIPTION": "Simulated three-slot image uploader",
    "VESSEL_SERVER_HOST": "0.0.0.0",
    "VESSEL_SERVER_PORT": "5000",
    "VESSEL_SERVER_LOG_LEVEL": "info",
    "VESSEL_SERVER_DATA": os.path.join(_TEMP_ROOT, "data"),
    "VESSEL_SERVER_CACHE": os.path.join(_TEMP_ROOT, "cache"),
    "VESSEL_UPLOAD_TICK_MS": "120",
    "VESSEL_UPLOAD_MIN_SECONDS": "10",
    "VESSEL_UPLOAD_MAX_SECONDS": "15",
}


@dataclass(frozen=True)
class ServerEnvironmentConfig:
    name: str
    description: str
    host: str
    port: int
    log_level: str
    data_folder: str
    cache_folder: str
    tick_ms: float
    min_seconds: float
    max_seconds: float


def _coalesce_env(key: str) -> str:
    default = _DEFAULTS.get(key)
    value = os.getenv(key)
    if value is None:
        if default is None:
            raise RuntimeError(f"Missing environment variable '{key}'")
        return default
    trimmed = value.strip()
    if not trimmed:
        if default is not None:
            return default
        raise RuntimeError(f"Environment variable '{key}' cannot be empty")
    return trimmed


def _parse_int(key: str) -> int:
    raw = _coalesce_env(key)
    try:
        return int(raw)
    except ValueError as exc:  # pragma: no cover - defensive parsing
        raise RuntimeError(f"Environment variable '{key}' must be an integer") from exc


def _parse_number(key: str) -> float:
    raw = _coalesce_env(key)
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"Environment variable '{key}' must be a number") from exc


@lru_cache(maxsize=1)
def get_server_environment() -> ServerEnvironmentConfig:
    name = _coalesce_env("VESSEL_SERVER_NAME")
    description = _coalesce_env("VESSEL_SERVER_DESCRIPTION")
    host = _coalesce_env("VESSEL_SERVER_HOST")
    port = _parse_int("VESSEL_SERVER_PORT")
    log_level = _coalesce_env("VESSEL_SERVER_LOG_LEVEL").lower()
    data_folder = _coalesce_env("VESSEL_SERVER_DATA")
    cache_folder = _coalesce_env("VESSEL_SERVER_CACHE")
    os.makedirs(data_folder, exist_ok=True)
    os.makedirs(cache_folder, exist_ok=True)

    return ServerEnvironmentConfig(
        name=name,
        description=description,
        host=host,
        port=port,
        log_level=log_level,
        data_folder=data_folder,
        cache_folder=cache_folder,
        tick_ms=_parse_number("VESSEL_UPLOAD_TICK_MS"),
        min_seconds=_parse_number("VESSEL_UPLOAD_MIN_SECONDS"),
        max_seconds=_parse_number("VESSEL_UPLOAD_MAX_SECONDS"),
    )


__all__ = ["ServerEnvironmentConfig", "get_server_environment"]
