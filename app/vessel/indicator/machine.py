"""Progress indicator state machine (``playing`` / ``paused`` / ``done``)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional, Tuple, TypedDict

from ..common.timing import TimingLoop, resolve_loop
from ..config import (
    FRAME_INTERVAL_SECONDS,
    INDICATOR_COLORS,
    INDICATOR_HEIGHT,
    INDICATOR_POINTS,
    INDICATOR_WIDTH,
    WHIP_BEND,
    WHIP_DURATION_SECONDS,
    WHIP_SHARPNESS,
    WHIP_TENSION,
    IndicatorMode,
    SweepDirection,
)
from ..log_config import debug_verbose
from ..utils import normalize_percent
from .geometry import (
    build_smooth_cubic_path,
    lerp_color,
    make_anchors_x,
    whip_offsets,
)
from .surface import RenderSurface, SvgSurface
from .tween import Tween


def _default_colors() -> Mapping[IndicatorMode, str]:
    return dict(INDICATOR_COLORS)


@dataclass(frozen=True)
class IndicatorStyle:
    width: float = INDICATOR_WIDTH
    height: float = INDICATOR_HEIGHT
    points: int = INDICATOR_POINTS
    colors: Mapping[IndicatorMode, str] = field(default_factory=_default_colors)
    duration: float = WHIP_DURATION_SECONDS
    tension: float = WHIP_TENSION
    bend: float = WHIP_BEND
    sharpness: float = WHIP_SHARPNESS
    frame_interval: float = FRAME_INTERVAL_SECONDS

    def baseline(self, mode: IndicatorMode) -> float:
        playing = self.height * 0.25
        if mode is IndicatorMode.PAUSED:
            return playing + self.height * 0.25
        return playing

    def color(self, mode: IndicatorMode) -> str:
        return self.colors[mode]


class IndicatorStatePayload(TypedDict):
    mode: str
    color: str
    reveal_progress: float
    visible_length: float
    animating: bool
    points: List[float]
    path: str


class ProgressIndicator:
    """Animated proxy for aggregate upload progress.

    The indicator never reads slot state: it is told to ``play``/``pause`` and
    is handed a progress number. Mode changes animate a whip-like sweep of the
    curve toward the new baseline and colour; ``reset`` and reaching 100
    progress snap to a flat resting state synchronously.
    """

    def __init__(
        self,
        surface: Optional[RenderSurface] = None,
        *,
        style: Optional[IndicatorStyle] = None,
        loop: Optional[TimingLoop] = None,
        initial_mode: IndicatorMode = IndicatorMode.PLAYING,
    ) -> None:
        self.style = style or IndicatorStyle()
        self.surface: RenderSurface = surface or SvgSurface(
            self.style.width, self.style.height
        )
        self._loop = loop
        self._anchors = make_anchors_x(self.style.points, self.style.width)
        self._mode = initial_mode
        self._target: Optional[IndicatorMode] = None
        self._progress = 0.0
        self._tween: Optional[Tween] = None
        self._y: List[float] = []
        self._color = ""
        self._apply_flat(initial_mode)
        self._render_reveal()

    def bind_loop(self, loop: TimingLoop) -> None:
        self._loop = loop

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------
    @property
    def mode(self) -> IndicatorMode:
        return self._mode

    @property
    def color(self) -> str:
        return self._color

    @property
    def points(self) -> Tuple[float, ...]:
        return tuple(self._y)

    @property
    def animating(self) -> bool:
        return self._tween is not None and self._tween.active

    @property
    def progress(self) -> float:
        return self._progress

    @progress.setter
    def progress(self, value: float) -> None:
        self.set_progress(value)

    @property
    def visible_length(self) -> float:
        return self._progress / 100 * self.style.width

    def to_payload(self) -> IndicatorStatePayload:
        return {
            "mode": self._mode.value,
            "color": self._color,
            "reveal_progress": self._progress,
            "visible_length": round(self.visible_length, 3),
            "animating": self.animating,
            "points": [round(y, 3) for y in self._y],
            "path": self._path(),
        }

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def play(self) -> bool:
        if self._mode is not IndicatorMode.PAUSED:
            return False
        if self._target is IndicatorMode.PLAYING and self.animating:
            return False
        self._run_whip(IndicatorMode.PLAYING, on_done=self._settle_playing)
        return True

    def pause(self) -> bool:
        """Flip to paused and sweep toward the paused baseline.

        Also honoured while a ``play`` sweep is still in flight, so the last
        command wins. No-op once done.
        """
        playing_intent = self._mode is IndicatorMode.PLAYING or (
            self._target is IndicatorMode.PLAYING and self.animating
        )
        if not playing_intent or self._mode is IndicatorMode.DONE:
            return False
        self._run_whip(IndicatorMode.PAUSED)
        self._mode = IndicatorMode.PAUSED
        return True

    def set_mode(self, is_paused: bool) -> bool:
        return self.pause() if is_paused else self.play()

    def reset(self) -> None:
        self._cancel_tween()
        self._mode = IndicatorMode.PLAYING
        self._progress = 0.0
        self._apply_flat(IndicatorMode.PLAYING)
        self._render_reveal()
        debug_verbose("indicator_reset", {"color": self._color})

    def set_progress(self, value: float) -> None:
        self._progress = normalize_percent(value) or 0.0
        if self._progress >= 100 and self._mode is not IndicatorMode.DONE:
            self._cancel_tween()
            self._mode = IndicatorMode.DONE
            self._apply_flat(IndicatorMode.DONE)
        self._render_reveal()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _settle_playing(self) -> None:
        self._mode = IndicatorMode.PLAYING

    def _run_whip(
        self,
        target: IndicatorMode,
        *,
        direction: SweepDirection = SweepDirection.LTR,
        on_done: Optional[Callable[[], None]] = None,
    ) -> None:
        loop = resolve_loop(self._loop)
        self._loop = loop
        self._cancel_tween()
        style = self.style
        from_y = list(self._y)
        from_color = self._color
        to_y = style.baseline(target)
        to_color = style.color(target)
        source = (
            IndicatorMode.PLAYING
            if target is IndicatorMode.PAUSED
            else IndicatorMode.PAUSED
        )
        sign = 1.0 if to_y > style.baseline(source) else -1.0
        self._target = target
        self._render_reveal()

        def update(p: float) -> None:
            self._color = lerp_color(from_color, to_color, p)
            self.surface.set_stroke(self._color)
            self._y = whip_offsets(
                p,
                from_y,
                to_y,
                direction=direction,
                sign=sign,
                sharpness=style.sharpness,
                bend=style.bend,
            )
            self._render_path()

        def complete() -> None:
            self._tween = None
            self._target = None
            self._apply_flat(target)
            self._render_reveal()
            if on_done is not None:
                on_done()

        tween = Tween(
            loop,
            duration=style.duration,
            frame_interval=style.frame_interval,
            on_update=update,
            on_complete=complete,
        )
        self._tween = tween
        tween.start()

    def _cancel_tween(self) -> None:
        tween = self._tween
        self._tween = None
        self._target = None
        if tween is not None:
            tween.cancel()

    def _apply_flat(self, mode: IndicatorMode) -> None:
        self._color = self.style.color(mode)
        self._y = [self.style.baseline(mode)] * self.style.points
        self.surface.set_stroke(self._color)
        self._render_path()

    def _path(self) -> str:
        return build_smooth_cubic_path(
            list(zip(self._anchors, self._y)), self.style.tension
        )

    def _render_path(self) -> None:
        self.surface.set_path(self._path())

    def _render_reveal(self) -> None:
        self.surface.set_reveal(self.style.width, self.visible_length)


__all__ = ["IndicatorStatePayload", "IndicatorStyle", "ProgressIndicator"]
