from .machine import IndicatorStatePayload, IndicatorStyle, ProgressIndicator
from .surface import RenderSurface, SvgSurface
from .tween import Tween

__all__ = [
    "IndicatorStatePayload",
    "IndicatorStyle",
    "ProgressIndicator",
    "RenderSurface",
    "SvgSurface",
    "Tween",
]
