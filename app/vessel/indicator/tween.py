from __future__ import annotations

from typing import Callable, Optional

from ..common.timing import TimerHandleLike, TimingLoop, resolve_loop
from ..log_config import verbose_log
from .geometry import ease_power1_in_out


class Tween:
    """Frame-driven interpolation from 0 to 1 over ``duration`` seconds.

    ``on_update`` receives the eased position on every frame; ``on_complete``
    runs once after the final frame. :meth:`cancel` stops it synchronously and
    neither callback fires afterwards.
    """

    def __init__(
        self,
        loop: Optional[TimingLoop],
        *,
        duration: float,
        frame_interval: float,
        on_update: Callable[[float], None],
        on_complete: Callable[[], None],
        ease: Callable[[float], float] = ease_power1_in_out,
    ) -> None:
        self._loop = resolve_loop(loop)
        self._duration = max(0.0, duration)
        self._frame_interval = frame_interval
        self._on_update = on_update
        self._on_complete = on_complete
        self._ease = ease
        self._started_at = 0.0
        self._handle: Optional[TimerHandleLike] = None
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> "Tween":
        self._started_at = self._loop.time()
        self._active = True
        if self._duration == 0:
            self._finish()
        else:
            self._schedule()
        return self

    def cancel(self) -> None:
        self._active = False
        handle = self._handle
        self._handle = None
        if handle is not None:
            handle.cancel()

    def _schedule(self) -> None:
        self._handle = self._loop.call_later(self._frame_interval, self._frame)

    def _frame(self) -> None:
        self._handle = None
        if not self._active:
            return
        elapsed = self._loop.time() - self._started_at
        raw = elapsed / self._duration
        if raw >= 1:
            self._finish()
            return
        try:
            self._on_update(self._ease(raw))
        except Exception as exc:  # noqa: BLE001 - keep animating on a bad frame
            verbose_log("tween_frame_failed", {"error": repr(exc)})
        if self._active:
            self._schedule()

    def _finish(self) -> None:
        self._active = False
        self._on_complete()


__all__ = ["Tween"]
