from __future__ import annotations

from html import escape
from typing import Protocol


class RenderSurface(Protocol):
    """The only three drawing calls the indicator makes."""

    def set_path(self, d: str) -> None: ...

    def set_stroke(self, color: str) -> None: ...

    def set_reveal(self, length: float, visible: float) -> None: ...


class SvgSurface:
    """Keeps the latest path attributes and renders them as an SVG document."""

    STROKE_WIDTH = 2.5

    def __init__(self, width: float, height: float) -> None:
        self.width = width
        self.height = height
        self.path = ""
        self.stroke = ""
        self.dash_length = 0.0
        self.visible_length = 0.0
        self.frames = 0

    def set_path(self, d: str) -> None:
        self.path = d
        self.frames += 1

    def set_stroke(self, color: str) -> None:
        self.stroke = color

    def set_reveal(self, length: float, visible: float) -> None:
        self.dash_length = length
        self.visible_length = visible

    @property
    def dash_offset(self) -> float:
        return self.dash_length - self.visible_length

    def to_svg(self) -> str:
        w = f"{self.width:g}"
        h = f"{self.height:g}"
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{w}" height="{h}" '
            f'viewBox="0 0 {w} {h}">'
            f'<path d="{escape(self.path)}" stroke="{escape(self.stroke)}" '
            f'stroke-width="{self.STROKE_WIDTH:g}" fill="none" '
            'stroke-linecap="round" stroke-linejoin="round" '
            f'stroke-dasharray="{self.dash_length:g}" '
            f'stroke-dashoffset="{self.dash_offset:g}"/>'
            "</svg>"
        )


__all__ = ["RenderSurface", "SvgSurface"]
