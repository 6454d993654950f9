from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Optional, Union

Number = Union[int, float]


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def clamp(value: Number, minimum: Number, maximum: Number) -> float:
    return float(max(minimum, min(maximum, value)))


def lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


def round_half_up(value: float) -> int:
    """Round like ``Math.round``: halves always go up, even when negative."""
    return int(math.floor(value + 0.5))


def normalize_percent(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        numeric = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith("%"):
            text = text[:-1].strip()
        try:
            numeric = float(text)
        except (TypeError, ValueError):
            return None
    if numeric != numeric:  # NaN
        return None
    return clamp(numeric, 0.0, 100.0)


def format_bytes(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


__all__ = [
    "clamp",
    "format_bytes",
    "lerp",
    "normalize_percent",
    "now_iso",
    "round_half_up",
]
