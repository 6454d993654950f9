from __future__ import annotations

import os
import random
import tempfile
from pathlib import Path
from typing import Callable, List, Optional

import pytest

_SANDBOX = Path(tempfile.mkdtemp(prefix="vessel-tests-"))
os.environ.setdefault("VESSEL_SERVER_DATA", str(_SANDBOX / "data"))
os.environ.setdefault("VESSEL_SERVER_CACHE", str(_SANDBOX / "cache"))

from vessel.upload import UploadFile, UploadManager, UploadSettings  # noqa: E402

MB = 1024 * 1024
EPSILON = 1e-9


class ManualHandle:
    def __init__(self, when: float, seq: int, callback: Callable[[], None]) -> None:
        self.when = when
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualLoop:
    """Deterministic stand-in for the asyncio loop's ``time``/``call_later``."""

    def __init__(self) -> None:
        self.now = 0.0
        self._seq = 0
        self._handles: List[ManualHandle] = []

    def time(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        self._seq += 1
        handle = ManualHandle(self.now + delay, self._seq, callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for handle in self._handles if not handle.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [
                handle
                for handle in self._handles
                if not handle.cancelled and handle.when <= target + EPSILON
            ]
            if not due:
                break
            handle = min(due, key=lambda item: (item.when, item.seq))
            self._handles.remove(handle)
            self.now = max(self.now, handle.when)
            handle.callback()
        self._handles = [handle for handle in self._handles if not handle.cancelled]
        self.now = target

    def run_until_idle(self, limit: float = 3600.0) -> None:
        while self.pending and self.now < limit:
            next_when = min(h.when for h in self._handles if not h.cancelled)
            self.advance(max(0.0, next_when - self.now))


def make_file(
    name: str = "photo.jpg",
    size: int = MB,
    mime_type: str = "image/jpeg",
) -> UploadFile:
    return UploadFile(name=name, size=size, mime_type=mime_type)


@pytest.fixture
def manual_loop() -> ManualLoop:
    return ManualLoop()


@pytest.fixture
def make_manager(manual_loop: ManualLoop) -> Callable[..., UploadManager]:
    def factory(
        *,
        tick_ms: float = 100.0,
        min_seconds: float = 10.0,
        max_seconds: float = 10.0,
        seed: Optional[int] = 7,
        socket_manager=None,
    ) -> UploadManager:
        settings = UploadSettings(
            tick_ms=tick_ms, min_seconds=min_seconds, max_seconds=max_seconds
        )
        return UploadManager(
            socket_manager,
            settings=settings,
            rng=random.Random(seed),
            loop=manual_loop,
        )

    return factory
