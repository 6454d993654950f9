"""Shared periodic driver advancing every active upload slot."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional

from ..common.timing import TimerHandleLike, TimingLoop, resolve_loop
from ..log_config import debug_verbose, verbose_log


class SchedulerState(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


class TickScheduler:
    """Single self-rearming timer shared by all slots.

    ``start`` and ``stop`` are idempotent. The callback runs to completion
    before the next tick is armed; if it raises, the error is logged and the
    driver keeps ticking. A callback that calls :meth:`stop` prevents the next
    tick from being armed.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        *,
        interval_ms: float,
        loop: Optional[TimingLoop] = None,
        name: str = "upload",
    ) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self._callback = callback
        self._interval_ms = float(interval_ms)
        self._loop = loop
        self._name = name
        self._handle: Optional[TimerHandleLike] = None
        self._state = SchedulerState.CREATED
        self.tick_count = 0

    @property
    def interval_ms(self) -> float:
        return self._interval_ms

    def set_interval(self, interval_ms: float) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        if self.running:
            raise RuntimeError("cannot change the interval of a running driver")
        self._interval_ms = float(interval_ms)

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is SchedulerState.RUNNING

    def bind_loop(self, loop: TimingLoop) -> None:
        """Bind the host loop; a running driver is re-armed on the new loop."""
        was_running = self.running
        self._cancel_handle()
        self._loop = loop
        if was_running:
            self._arm()

    def ensure_loop(self) -> TimingLoop:
        """Resolve and keep the host loop; raises RuntimeError when none is available."""
        loop = resolve_loop(self._loop)
        self._loop = loop
        return loop

    def start(self) -> bool:
        if self.running:
            return False
        self._arm()
        self._state = SchedulerState.RUNNING
        debug_verbose("scheduler_started", {"name": self._name})
        return True

    def stop(self) -> bool:
        if not self.running:
            return False
        self._state = SchedulerState.STOPPED
        self._cancel_handle()
        debug_verbose(
            "scheduler_stopped", {"name": self._name, "ticks": self.tick_count}
        )
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _arm(self) -> None:
        loop = self.ensure_loop()
        self._handle = loop.call_later(self._interval_ms / 1000.0, self._fire)

    def _cancel_handle(self) -> None:
        handle = self._handle
        self._handle = None
        if handle is not None:
            handle.cancel()

    def _fire(self) -> None:
        self._handle = None
        if not self.running:
            return
        self.tick_count += 1
        try:
            self._callback()
        except Exception as exc:  # noqa: BLE001 - a faulty tick must not kill the driver
            verbose_log(
                "scheduler_tick_failed",
                {"name": self._name, "tick": self.tick_count, "error": repr(exc)},
            )
        if self.running and self._handle is None:
            self._arm()


__all__ = ["SchedulerState", "TickScheduler"]
