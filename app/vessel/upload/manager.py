from __future__ import annotations

import math
import random
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from ..common.timing import TimingLoop
from ..config import (
    ACTIVE_STATUSES,
    PLACEHOLDER_FILE_SIZE,
    PLACEHOLDER_MIME_TYPE,
    SLOT_ORDER,
    SlotKey,
    SocketEvent,
    SocketRoom,
    UploadStatus,
    UploadUpdateReason,
)
from ..exceptions import InvalidFileError
from ..log_config import verbose_log
from ..models.socket import OverviewPayload, SlotProgressPayload
from ..sockets import SocketManager
from ..utils import now_iso
from .aggregate import UploadOverview
from .models import (
    PersistedSlotPayload,
    SlotSnapshot,
    SlotSnapshotPayload,
    TaskMetadata,
    UploadFile,
)
from .previews import PreviewRegistry
from .scheduler import TickScheduler
from .settings import UploadSettings
from .slot_store import SlotStore

UploadListener = Callable[[str, UploadOverview], None]


class UploadManager:
    """Coordinates the three upload slots, their simulated progress and notifications.

    All mutation happens on the host loop's thread: the public commands are
    called from request handlers and the tick runs as a loop callback, so no
    locking is needed around slot state.
    """

    OVERVIEW_ROOM = SocketRoom.OVERVIEW.value

    def __init__(
        self,
        socket_manager: Optional[SocketManager] = None,
        *,
        settings: Optional[UploadSettings] = None,
        rng: Optional[random.Random] = None,
        loop: Optional[TimingLoop] = None,
        previews: Optional[PreviewRegistry] = None,
    ) -> None:
        self.socket_manager = socket_manager
        self.settings = settings or UploadSettings()
        self.rng = rng or random.Random()
        self.store = SlotStore(previews)
        self.metadata: Dict[SlotKey, TaskMetadata] = {
            key: TaskMetadata() for key in SLOT_ORDER
        }
        self.scheduler = TickScheduler(
            self._tick, interval_ms=self.settings.tick_ms, loop=loop
        )
        self._listeners: List[UploadListener] = []
        self._restored = False

    def bind_loop(self, loop: TimingLoop) -> None:
        self.scheduler.bind_loop(loop)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    def slot(self, slot: SlotKey | str) -> Optional[SlotSnapshot]:
        return self.store.snapshot(slot)

    def slots(self) -> Dict[SlotKey, Optional[SlotSnapshot]]:
        return {key: self.store.snapshot(key) for key in SLOT_ORDER}

    def serialize_slots(self) -> Dict[str, Optional[SlotSnapshotPayload]]:
        return {
            key.value: snapshot.to_payload() if snapshot else None
            for key, snapshot in self.slots().items()
        }

    def overview(self) -> UploadOverview:
        return UploadOverview.project(entry for _, entry in self.store)

    @property
    def is_running(self) -> bool:
        return self.scheduler.running

    @property
    def is_active(self) -> bool:
        return any(entry.status in ACTIVE_STATUSES for _, entry in self.store.filled())

    def apply_settings(self, settings: UploadSettings) -> bool:
        """Swap the simulation settings; refused while a batch is uploading or paused."""
        if self.is_active:
            return False
        self.scheduler.set_interval(settings.tick_ms)
        self.settings = settings
        verbose_log(
            "upload_settings_applied",
            {
                "tick_ms": settings.tick_ms,
                "min_seconds": settings.min_seconds,
                "max_seconds": settings.max_seconds,
            },
        )
        return True

    # ------------------------------------------------------------------
    # Slot commands
    # ------------------------------------------------------------------
    def assign(self, slot: SlotKey | str, file: UploadFile) -> SlotSnapshot:
        key = SlotKey.from_value(slot)
        try:
            self.store.assign(key, file)
        except InvalidFileError as exc:
            verbose_log(
                "assign_rejected",
                {"slot": key.value, "reason": exc.reason, "size": file.size},
            )
            raise
        self.metadata[key].reset()
        verbose_log(
            "slot_assigned",
            {"slot": key.value, "name": file.name, "size": file.size},
        )
        self._stop_if_idle()
        self._notify(UploadUpdateReason.ASSIGNED.value, [key])
        snapshot = self.store.snapshot(key)
        assert snapshot is not None
        return snapshot

    def clear(self, slot: SlotKey | str) -> bool:
        key = SlotKey.from_value(slot)
        removed = self.store.clear(key)
        self.metadata[key].reset()
        if not removed:
            return False
        verbose_log("slot_cleared", {"slot": key.value})
        self._stop_if_idle()
        self._notify(UploadUpdateReason.CLEARED.value, [key])
        return True

    def clear_all(self) -> int:
        self.scheduler.stop()
        removed = self.store.clear_all()
        for meta in self.metadata.values():
            meta.reset()
        verbose_log("slots_cleared", {"count": removed})
        self._notify(UploadUpdateReason.CLEARED_ALL.value, list(SLOT_ORDER))
        return removed

    # ------------------------------------------------------------------
    # Upload lifecycle
    # ------------------------------------------------------------------
    def start_upload(self) -> List[SlotKey]:
        pending = [
            key
            for key, entry in self.store.filled()
            if entry.status == UploadStatus.PENDING.value
        ]
        if not pending:
            return []
        self.scheduler.ensure_loop()
        minimum = self.settings.min_seconds
        maximum = self.settings.max_seconds
        for key in pending:
            seconds = minimum + self.rng.random() * (maximum - minimum)
            self.metadata[key].reset(seconds * 1000)
            self.store.update(
                key,
                status=UploadStatus.UPLOADING.value,
                time_left=math.ceil(seconds),
            )
        verbose_log(
            "upload_started",
            {
                "slots": [key.value for key in pending],
                "durations_ms": [self.metadata[key].duration_ms for key in pending],
            },
        )
        self.scheduler.start()
        self._notify(UploadUpdateReason.STARTED.value, pending)
        return pending

    def pause_all(self) -> List[SlotKey]:
        for meta in self.metadata.values():
            meta.paused = True
        paused = self._transition(UploadStatus.UPLOADING, UploadStatus.PAUSED)
        self.scheduler.stop()
        verbose_log("upload_paused", {"slots": [key.value for key in paused]})
        self._notify(UploadUpdateReason.PAUSED.value, paused)
        return paused

    def resume_all(self) -> List[SlotKey]:
        for meta in self.metadata.values():
            meta.paused = False
        resumed = self._transition(UploadStatus.PAUSED, UploadStatus.UPLOADING)
        if self._has_advancing_work():
            self.scheduler.start()
        verbose_log("upload_resumed", {"slots": [key.value for key in resumed]})
        self._notify(UploadUpdateReason.RESUMED.value, resumed)
        return resumed

    def reset_upload(self) -> List[SlotKey]:
        """Return every filled slot to ``pending`` so the batch can start over."""
        self.scheduler.stop()
        reset: List[SlotKey] = []
        for key, _ in self.store.filled():
            self.metadata[key].reset()
            self.store.update(
                key, progress=0.0, status=UploadStatus.PENDING.value, time_left=0
            )
            reset.append(key)
        verbose_log("upload_reset", {"slots": [key.value for key in reset]})
        self._notify(UploadUpdateReason.RESET.value, reset)
        return reset

    # ------------------------------------------------------------------
    # Persisted placeholders
    # ------------------------------------------------------------------
    def import_persisted(
        self, placeholders: Mapping[SlotKey | str, PersistedSlotPayload]
    ) -> List[SlotKey]:
        """Pre-populate empty slots with completed placeholders, once."""
        if self._restored:
            verbose_log("persisted_import_ignored", {"reason": "already_imported"})
            return []
        self._restored = True
        restored: List[SlotKey] = []
        for slot_name, entry in placeholders.items():
            key = SlotKey.from_value(slot_name)
            if self.store.get(key) is not None:
                continue
            placeholder = UploadFile(
                name=entry.get("name") or f"{key.value}.jpeg",
                size=int(entry.get("size", PLACEHOLDER_FILE_SIZE)),
                mime_type=PLACEHOLDER_MIME_TYPE,
            )
            self.store.assign(key, placeholder, validate=False)
            self.store.update(
                key, progress=100.0, status=UploadStatus.COMPLETED.value, time_left=0
            )
            restored.append(key)
        if restored:
            verbose_log("persisted_imported", {"slots": [k.value for k in restored]})
            self._notify(UploadUpdateReason.RESTORED.value, restored)
        return restored

    def persisted_state(self) -> Dict[SlotKey, PersistedSlotPayload]:
        return {
            key: {"name": entry.file.name, "size": entry.file.size}
            for key, entry in self.store.filled()
            if entry.status == UploadStatus.COMPLETED.value
        }

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    def add_listener(self, listener: UploadListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: UploadListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def emit_overview(
        self, reason: str, overview: Optional[UploadOverview] = None
    ) -> None:
        if self.socket_manager is None:
            return
        payload = OverviewPayload(
            reason=reason,
            timestamp=now_iso(),
            summary=overview or self.overview(),
        )
        self.socket_manager.emit(
            SocketEvent.OVERVIEW.value, payload.to_dict(), room=self.OVERVIEW_ROOM
        )

    def emit_slot_progress(self, slot: SlotKey, reason: str) -> None:
        if self.socket_manager is None:
            return
        snapshot = self.store.snapshot(slot)
        payload = SlotProgressPayload(
            reason=reason,
            timestamp=now_iso(),
            slot=slot.value,
            name=snapshot.name if snapshot else None,
            status=snapshot.status if snapshot else None,
            progress=round(snapshot.progress, 2) if snapshot else None,
            time_left=snapshot.time_left if snapshot else None,
        ).to_dict()
        self.socket_manager.emit(
            SocketEvent.PROGRESS.value, payload, room=self.OVERVIEW_ROOM
        )
        self.socket_manager.emit(
            SocketEvent.PROGRESS.value, payload, room=SocketRoom.for_slot(slot.value)
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _tick(self) -> None:
        tick_ms = self.scheduler.interval_ms
        advanced: List[SlotKey] = []
        for key, entry in self.store.filled():
            meta = self.metadata[key]
            if meta.paused:
                continue
            if entry.status != UploadStatus.UPLOADING.value:
                continue
            if entry.progress >= 100:
                continue

            steps = max(1, math.floor(meta.duration_ms / tick_ms))
            meta.ticks += 1
            progress = min(100.0, meta.ticks * 100.0 / steps)
            if progress >= 100:
                self.store.update(
                    key,
                    progress=100.0,
                    status=UploadStatus.COMPLETED.value,
                    time_left=0,
                )
                verbose_log(
                    "slot_completed", {"slot": key.value, "ticks": meta.ticks}
                )
            else:
                remaining_ms = meta.duration_ms * (1 - progress / 100)
                self.store.update(
                    key,
                    progress=progress,
                    status=UploadStatus.UPLOADING.value,
                    time_left=max(0, math.ceil(remaining_ms / 1000)),
                )
            advanced.append(key)

        self._stop_if_idle()
        self._notify(UploadUpdateReason.TICK.value, advanced)

    def _transition(self, source: UploadStatus, target: UploadStatus) -> List[SlotKey]:
        moved: List[SlotKey] = []
        for key, entry in self.store.filled():
            if entry.status == source.value:
                self.store.update(key, status=target.value)
                moved.append(key)
        return moved

    def _has_advancing_work(self) -> bool:
        return any(
            entry.status == UploadStatus.UPLOADING.value and entry.progress < 100
            for _, entry in self.store.filled()
        )

    def _stop_if_idle(self) -> None:
        still_uploading = any(
            entry.status == UploadStatus.UPLOADING.value
            for _, entry in self.store.filled()
        )
        if not still_uploading:
            self.scheduler.stop()

    def _notify(self, reason: str, slots: Iterable[SlotKey]) -> None:
        overview = self.overview()
        for listener in list(self._listeners):
            try:
                listener(reason, overview)
            except Exception as exc:  # noqa: BLE001 - listeners must not break uploads
                verbose_log(
                    "upload_listener_failed", {"reason": reason, "error": repr(exc)}
                )
        self.emit_overview(reason, overview)
        for key in slots:
            self.emit_slot_progress(key, reason)


__all__ = ["UploadListener", "UploadManager"]
