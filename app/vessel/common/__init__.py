from .timing import TimerHandleLike, TimingLoop, resolve_loop

__all__ = ["TimerHandleLike", "TimingLoop", "resolve_loop"]
