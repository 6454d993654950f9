"""Host timing loop contracts shared by the scheduler and the indicator."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, Protocol


class TimerHandleLike(Protocol):
    def cancel(self) -> None: ...


class TimingLoop(Protocol):
    """Subset of :class:`asyncio.AbstractEventLoop` the periodic drivers need."""

    def time(self) -> float: ...

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> TimerHandleLike: ...


def resolve_loop(loop: Optional[TimingLoop]) -> TimingLoop:
    """Return ``loop`` or fall back to the running asyncio loop."""

    if loop is not None:
        return loop
    try:
        return asyncio.get_running_loop()
    except RuntimeError as exc:
        raise RuntimeError(
            "no timing loop bound; call bind_loop() or run inside an event loop"
        ) from exc


__all__ = ["TimerHandleLike", "TimingLoop", "resolve_loop"]
