from .helpers import (
    clamp,
    format_bytes,
    lerp,
    normalize_percent,
    now_iso,
    round_half_up,
)

__all__ = [
    "clamp",
    "format_bytes",
    "lerp",
    "normalize_percent",
    "now_iso",
    "round_half_up",
]
