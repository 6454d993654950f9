from __future__ import annotations

from typing import List

import pytest

from vessel.upload import SchedulerState, TickScheduler


def test_start_and_stop_are_idempotent(manual_loop) -> None:
    calls: List[int] = []
    scheduler = TickScheduler(lambda: calls.append(1), interval_ms=100, loop=manual_loop)

    assert scheduler.state is SchedulerState.CREATED
    assert scheduler.start() is True
    assert scheduler.start() is False
    assert manual_loop.pending == 1

    manual_loop.advance(0.35)
    assert len(calls) == 3

    assert scheduler.stop() is True
    assert scheduler.stop() is False
    assert scheduler.state is SchedulerState.STOPPED
    manual_loop.advance(1.0)
    assert len(calls) == 3
    assert manual_loop.pending == 0


def test_faulty_callback_does_not_stop_the_driver(manual_loop) -> None:
    ticks: List[int] = []

    def flaky() -> None:
        ticks.append(1)
        if len(ticks) == 2:
            raise RuntimeError("boom")

    scheduler = TickScheduler(flaky, interval_ms=50, loop=manual_loop)
    scheduler.start()
    manual_loop.advance(0.2)

    assert len(ticks) == 4
    assert scheduler.running
    assert scheduler.tick_count == 4


def test_callback_stopping_the_driver_prevents_rearm(manual_loop) -> None:
    holder: List[TickScheduler] = []

    def once() -> None:
        holder[0].stop()

    scheduler = TickScheduler(once, interval_ms=10, loop=manual_loop)
    holder.append(scheduler)
    scheduler.start()
    manual_loop.advance(0.1)

    assert scheduler.tick_count == 1
    assert not scheduler.running
    assert manual_loop.pending == 0


def test_restart_after_stop(manual_loop) -> None:
    calls: List[int] = []
    scheduler = TickScheduler(lambda: calls.append(1), interval_ms=100, loop=manual_loop)
    scheduler.start()
    manual_loop.advance(0.1)
    scheduler.stop()
    scheduler.start()
    manual_loop.advance(0.1)
    assert len(calls) == 2


def test_interval_must_be_positive(manual_loop) -> None:
    with pytest.raises(ValueError):
        TickScheduler(lambda: None, interval_ms=0, loop=manual_loop)


def test_interval_cannot_change_while_running(manual_loop) -> None:
    scheduler = TickScheduler(lambda: None, interval_ms=100, loop=manual_loop)
    scheduler.set_interval(50)
    assert scheduler.interval_ms == 50
    scheduler.start()
    with pytest.raises(RuntimeError):
        scheduler.set_interval(200)


def test_start_without_loop_outside_asyncio_raises() -> None:
    scheduler = TickScheduler(lambda: None, interval_ms=100)
    with pytest.raises(RuntimeError):
        scheduler.start()
    assert scheduler.state is SchedulerState.CREATED


def test_ensure_loop_keeps_bound_loop(manual_loop) -> None:
    scheduler = TickScheduler(lambda: None, interval_ms=100)
    with pytest.raises(RuntimeError):
        scheduler.ensure_loop()
    scheduler.bind_loop(manual_loop)
    assert scheduler.ensure_loop() is manual_loop
    assert not scheduler.running
