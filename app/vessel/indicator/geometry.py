"""Curve and colour maths for the whip progress indicator."""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from ..config import SweepDirection
from ..utils import clamp, lerp

Point = Tuple[float, float]


def _fmt(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in {"-0", ""} else text


def _parse_hex(color: str) -> Tuple[int, int, int]:
    raw = color.lstrip("#")
    if len(raw) != 6:
        raise ValueError(f"expected #rrggbb colour, got '{color}'")
    return int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16)


def lerp_color(start: str, end: str, t: float) -> str:
    """Interpolate two ``#rrggbb`` colours channel by channel."""
    r1, g1, b1 = _parse_hex(start)
    r2, g2, b2 = _parse_hex(end)
    r = int(math.floor(lerp(r1, r2, t) + 0.5))
    g = int(math.floor(lerp(g1, g2, t) + 0.5))
    b = int(math.floor(lerp(b1, b2, t) + 0.5))
    return f"#{r:02x}{g:02x}{b:02x}"


def make_anchors_x(count: int, width: float) -> List[float]:
    if count < 2:
        return [0.0] * count
    step = width / (count - 1)
    return [i * step for i in range(count)]


def ease_power1_in_out(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    if t < 0.5:
        return 2 * t * t
    return 1 - ((-2 * t + 2) ** 2) / 2


def smoothstep(t: float) -> float:
    return t * t * (3 - 2 * t)


def whip_offsets(
    progress: float,
    from_y: Sequence[float],
    to_y: float,
    *,
    direction: SweepDirection,
    sign: float,
    sharpness: float,
    bend: float,
) -> List[float]:
    """Vertical offsets of every point at eased tween position ``progress``.

    Each point starts moving once the sweep front reaches it and carries a
    sine-shaped bend that fades as the point settles.
    """
    count = len(from_y)
    offsets: List[float] = []
    for i, start in enumerate(from_y):
        t = i / (count - 1) if count > 1 else 0.0
        local = 1 - t if direction is SweepDirection.RTL else t

        influence = clamp((progress - local) * sharpness, 0.0, 1.0)
        smooth = smoothstep(smoothstep(influence))

        y = lerp(start, to_y, smooth)
        bend_intensity = math.sin(influence * math.pi)
        tail_softness = 1 - smooth**1.5
        offsets.append(y + sign * bend * bend_intensity * tail_softness * 0.6)
    return offsets


def build_smooth_cubic_path(points: Sequence[Point], tension: float = 0.58) -> str:
    """Build an SVG path through ``points`` using Catmull-Rom style tangents."""
    if len(points) < 2:
        return ""
    k = clamp(tension, 0.0, 1.0)

    x0, y0 = points[0]
    parts = [f"M {_fmt(x0)} {_fmt(y0)}"]
    last = len(points) - 1
    for i in range(last):
        p0 = points[i - 1] if i > 0 else points[i]
        p1 = points[i]
        p2 = points[i + 1]
        p3 = points[i + 2] if i + 2 <= last else p2

        dx1 = (p2[0] - p0[0]) * k
        dy1 = (p2[1] - p0[1]) * k
        dx2 = (p3[0] - p1[0]) * k
        dy2 = (p3[1] - p1[1]) * k

        c1x = p1[0] + dx1 / 3
        c1y = p1[1] + dy1 / 3
        c2x = p2[0] - dx2 / 3
        c2y = p2[1] - dy2 / 3

        parts.append(
            f"C {_fmt(c1x)} {_fmt(c1y)}, {_fmt(c2x)} {_fmt(c2y)}, "
            f"{_fmt(p2[0])} {_fmt(p2[1])}"
        )
    return " ".join(parts)


__all__ = [
    "Point",
    "build_smooth_cubic_path",
    "ease_power1_in_out",
    "lerp_color",
    "make_anchors_x",
    "smoothstep",
    "whip_offsets",
]
