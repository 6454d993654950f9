from __future__ import annotations

import math
import random
from typing import Any, Dict, List, Optional, Tuple

import pytest

from vessel.config import (
    PLACEHOLDER_FILE_SIZE,
    PLACEHOLDER_MIME_TYPE,
    SLOT_ORDER,
    SlotKey,
    SocketEvent,
    SocketRoom,
    UploadStatus,
    UploadUpdateReason,
)
from vessel.exceptions import InvalidFileError
from vessel.sockets import SocketManager
from vessel.upload import UploadFile, UploadManager, UploadOverview, UploadSettings

MB = 1024 * 1024


def _file(name: str, size: int = MB, mime: str = "image/jpeg") -> UploadFile:
    return UploadFile(name=name, size=size, mime_type=mime)


def _fill(manager: UploadManager, sizes: Tuple[int, ...] = (1, 2, 19)) -> None:
    for key, size in zip(SLOT_ORDER, sizes):
        manager.assign(key, _file(f"{key.value}.jpg", size * MB))


def _statuses(manager: UploadManager) -> List[Optional[str]]:
    return [snap.status if snap else None for snap in manager.slots().values()]


class RecordingSocketManager(SocketManager):
    """Socket manager double that records emitted events."""

    def __init__(self) -> None:
        super().__init__()
        self.events: List[Dict[str, Any]] = []

    def emit(self, event: str, payload: Any, *, room: Optional[str] = None) -> None:
        self.events.append({"event": event, "payload": payload, "room": room})

    def select(
        self, *, event: Optional[str] = None, room: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        return [
            record
            for record in self.events
            if (event is None or record["event"] == event)
            and (room is None or record["room"] == room)
        ]


def test_assign_then_read_is_pending(make_manager) -> None:
    manager = make_manager()
    snapshot = manager.assign("first", _file("a.jpg"))

    assert snapshot.status == UploadStatus.PENDING.value
    assert snapshot.progress == 0
    assert manager.overview().filled_slots == 1
    assert not manager.is_running


def test_oversized_file_leaves_slot_empty(make_manager) -> None:
    manager = make_manager()
    with pytest.raises(InvalidFileError) as excinfo:
        manager.assign(SlotKey.SECOND, _file("huge.jpg", 21 * MB))

    assert excinfo.value.reason == InvalidFileError.FILE_TOO_LARGE
    assert manager.slot(SlotKey.SECOND) is None


def test_three_files_run_to_completion(make_manager, manual_loop) -> None:
    manager = make_manager(tick_ms=100, min_seconds=10, max_seconds=10)
    _fill(manager)

    started = manager.start_upload()
    assert started == list(SLOT_ORDER)
    assert manager.is_running
    for snap in manager.slots().values():
        assert snap is not None
        assert snap.status == UploadStatus.UPLOADING.value
        assert snap.time_left == 10
    assert manager.overview().total_time_left == 30

    manual_loop.advance(5.0)
    overview = manager.overview()
    assert overview.overall_progress == 50
    assert overview.total_time_left == 15

    manual_loop.advance(5.0)
    overview = manager.overview()
    assert _statuses(manager) == [UploadStatus.COMPLETED.value] * 3
    assert overview.overall_progress == 100
    assert overview.all_completed
    assert not overview.show_start_button
    assert overview.total_time_left == 0
    assert not manager.is_running
    assert manual_loop.pending == 0


def test_random_durations_complete_within_ceil_ticks(make_manager, manual_loop) -> None:
    manager = make_manager(tick_ms=120, min_seconds=10, max_seconds=15, seed=3)
    _fill(manager)
    manager.start_upload()

    durations = [manager.metadata[key].duration_ms for key in SLOT_ORDER]
    assert all(10_000 <= duration <= 15_000 for duration in durations)

    for key, duration in sorted(zip(SLOT_ORDER, durations), key=lambda kv: kv[1]):
        ticks_needed = math.ceil(duration / 120)
        elapsed_ticks = manager.scheduler.tick_count
        manual_loop.advance((ticks_needed - elapsed_ticks) * 0.12)
        snap = manager.slot(key)
        assert snap is not None
        assert snap.status == UploadStatus.COMPLETED.value
        assert snap.progress == 100

    manual_loop.run_until_idle()
    assert manager.overview().all_completed


def test_progress_never_exceeds_one_hundred(make_manager, manual_loop) -> None:
    manager = make_manager(tick_ms=100, min_seconds=0.05, max_seconds=0.05)
    manager.assign(SlotKey.FIRST, _file("tiny.png", mime="image/png"))
    manager.start_upload()

    manual_loop.advance(0.1)
    snap = manager.slot(SlotKey.FIRST)
    assert snap is not None
    assert snap.progress == 100
    assert snap.status == UploadStatus.COMPLETED.value
    assert not manager.is_running


def test_pause_then_resume_without_ticks_restores_uploading(
    make_manager, manual_loop
) -> None:
    manager = make_manager()
    _fill(manager)
    manager.start_upload()
    manual_loop.advance(1.0)
    before = {key: snap.progress for key, snap in manager.slots().items() if snap}

    paused = manager.pause_all()
    assert paused == list(SLOT_ORDER)
    assert _statuses(manager) == [UploadStatus.PAUSED.value] * 3
    assert not manager.is_running
    assert manager.overview().is_paused

    resumed = manager.resume_all()
    assert resumed == list(SLOT_ORDER)
    assert _statuses(manager) == [UploadStatus.UPLOADING.value] * 3
    assert manager.is_running
    after = {key: snap.progress for key, snap in manager.slots().items() if snap}
    assert after == before


def test_pause_freezes_progress(make_manager, manual_loop) -> None:
    manager = make_manager()
    _fill(manager)
    manager.start_upload()
    manual_loop.advance(2.0)
    manager.pause_all()
    frozen = manager.overview().overall_progress

    manual_loop.advance(30.0)
    assert manager.overview().overall_progress == frozen
    assert frozen == 20


def test_resume_clears_pause_flags_on_every_slot(make_manager, manual_loop) -> None:
    manager = make_manager()
    _fill(manager)
    manager.start_upload()
    manager.pause_all()
    assert all(meta.paused for meta in manager.metadata.values())

    manager.resume_all()
    assert not any(meta.paused for meta in manager.metadata.values())


def test_start_with_nothing_pending_is_noop(make_manager) -> None:
    manager = make_manager()
    assert manager.start_upload() == []
    assert not manager.is_running


def test_start_without_loop_leaves_slots_pending(manual_loop) -> None:
    manager = UploadManager(settings=UploadSettings(100, 1, 1), rng=random.Random(1))
    manager.assign(SlotKey.FIRST, _file("a.jpg"))

    with pytest.raises(RuntimeError):
        manager.start_upload()
    snap = manager.slot(SlotKey.FIRST)
    assert snap is not None and snap.status == UploadStatus.PENDING.value
    assert not manager.is_running
    assert not manager.is_active

    manager.scheduler.bind_loop(manual_loop)
    assert manager.start_upload() == [SlotKey.FIRST]
    assert manager.is_running


def test_apply_settings_refused_while_active(make_manager, manual_loop) -> None:
    manager = make_manager()
    faster = UploadSettings(tick_ms=50, min_seconds=1, max_seconds=1)
    assert manager.apply_settings(faster) is True
    assert manager.scheduler.interval_ms == 50.0

    manager.assign(SlotKey.FIRST, _file("a.jpg"))
    manager.start_upload()
    manager.pause_all()
    assert manager.is_active
    assert manager.apply_settings(UploadSettings()) is False
    assert manager.settings == faster

    manager.resume_all()
    manual_loop.run_until_idle()
    assert not manager.is_active
    assert manager.apply_settings(UploadSettings()) is True
    assert manager.scheduler.interval_ms == UploadSettings().tick_ms


def test_start_only_touches_pending_slots(make_manager, manual_loop) -> None:
    manager = make_manager()
    manager.assign(SlotKey.FIRST, _file("a.jpg"))
    manager.start_upload()
    manual_loop.advance(1.0)
    manager.assign(SlotKey.SECOND, _file("b.jpg"))

    started = manager.start_upload()
    assert started == [SlotKey.SECOND]
    first = manager.slot(SlotKey.FIRST)
    assert first is not None and first.progress == 10


def test_clearing_last_uploading_slot_stops_driver(make_manager, manual_loop) -> None:
    manager = make_manager()
    manager.assign(SlotKey.FIRST, _file("a.jpg"))
    manager.assign(SlotKey.SECOND, _file("b.jpg"))
    manager.start_upload()
    manual_loop.advance(0.5)

    assert manager.clear(SlotKey.FIRST) is True
    assert manager.is_running
    manual_loop.advance(0.5)
    second = manager.slot(SlotKey.SECOND)
    assert second is not None and second.progress == 10

    manager.clear(SlotKey.SECOND)
    assert not manager.is_running
    assert manual_loop.pending == 0


def test_clear_all_stops_and_releases_previews(make_manager, manual_loop) -> None:
    manager = make_manager()
    _fill(manager)
    manager.start_upload()
    manual_loop.advance(0.3)

    assert manager.clear_all() == 3
    assert not manager.is_running
    assert manager.store.previews.outstanding == 0
    assert manager.overview().filled_slots == 0


def test_replacing_uploading_file_restarts_it_as_pending(
    make_manager, manual_loop
) -> None:
    manager = make_manager()
    manager.assign(SlotKey.FIRST, _file("a.jpg"))
    manager.start_upload()
    manual_loop.advance(1.0)

    snapshot = manager.assign(SlotKey.FIRST, _file("b.jpg"))
    assert snapshot.status == UploadStatus.PENDING.value
    assert snapshot.progress == 0
    assert not manager.is_running


def test_reset_upload_keeps_files(make_manager, manual_loop) -> None:
    manager = make_manager()
    _fill(manager)
    manager.start_upload()
    manual_loop.advance(3.0)

    reset = manager.reset_upload()
    assert reset == list(SLOT_ORDER)
    assert _statuses(manager) == [UploadStatus.PENDING.value] * 3
    assert manager.overview().overall_progress == 0
    assert manager.overview().show_start_button
    assert not manager.is_running


def test_import_persisted_is_one_shot_and_skips_filled(make_manager) -> None:
    manager = make_manager()
    manager.assign(SlotKey.FIRST, _file("live.jpg"))

    restored = manager.import_persisted(
        {
            "first": {"name": "old.jpg", "size": 10},
            "second": {"name": "two.jpg"},
            SlotKey.THIRD: {"name": "three.jpg", "size": 1234},
        }
    )
    assert restored == [SlotKey.SECOND, SlotKey.THIRD]

    first = manager.slot(SlotKey.FIRST)
    second = manager.slot(SlotKey.SECOND)
    assert first is not None and first.name == "live.jpg"
    assert second is not None
    assert second.status == UploadStatus.COMPLETED.value
    assert second.progress == 100
    assert second.size == PLACEHOLDER_FILE_SIZE
    assert second.mime_type == PLACEHOLDER_MIME_TYPE

    assert manager.import_persisted({"first": {"name": "again.jpg"}}) == []
    assert manager.persisted_state() == {
        SlotKey.SECOND: {"name": "two.jpg", "size": PLACEHOLDER_FILE_SIZE},
        SlotKey.THIRD: {"name": "three.jpg", "size": 1234},
    }


def test_listeners_receive_reasons_and_survive_failures(
    make_manager, manual_loop
) -> None:
    manager = make_manager(min_seconds=0.3, max_seconds=0.3)
    seen: List[Tuple[str, UploadOverview]] = []

    def broken(reason: str, overview: UploadOverview) -> None:
        raise RuntimeError("listener bug")

    manager.add_listener(broken)
    manager.add_listener(lambda reason, overview: seen.append((reason, overview)))
    manager.assign(SlotKey.FIRST, _file("a.jpg"))
    manager.start_upload()
    manual_loop.advance(1.0)

    reasons = [reason for reason, _ in seen]
    assert reasons[:2] == [
        UploadUpdateReason.ASSIGNED.value,
        UploadUpdateReason.STARTED.value,
    ]
    assert reasons.count(UploadUpdateReason.TICK.value) == 3
    assert seen[-1][1].all_completed

    manager.remove_listener(broken)
    manager.remove_listener(broken)


def test_socket_events_reach_overview_and_slot_rooms(make_manager, manual_loop) -> None:
    sockets = RecordingSocketManager()
    manager = make_manager(socket_manager=sockets)
    manager.assign(SlotKey.SECOND, _file("b.png", mime="image/png"))
    manager.start_upload()
    manual_loop.advance(0.1)

    overview_events = sockets.select(
        event=SocketEvent.OVERVIEW.value, room=SocketRoom.OVERVIEW.value
    )
    assert [e["payload"]["reason"] for e in overview_events] == [
        UploadUpdateReason.ASSIGNED.value,
        UploadUpdateReason.STARTED.value,
        UploadUpdateReason.TICK.value,
    ]
    assert overview_events[-1]["payload"]["summary"]["overall_progress"] == 1

    slot_events = sockets.select(
        event=SocketEvent.PROGRESS.value, room=SocketRoom.for_slot("second")
    )
    assert slot_events[-1]["payload"]["slot"] == "second"
    assert slot_events[-1]["payload"]["progress"] == 1.0
    assert slot_events[-1]["payload"]["status"] == UploadStatus.UPLOADING.value
