from __future__ import annotations

import warnings
from typing import Dict, Iterator, List, Optional, Tuple

from ..config import (
    ACCEPTED_MIME_TYPES,
    MAX_FILE_SIZE,
    SLOT_ORDER,
    SlotKey,
    UploadStatus,
)
from ..exceptions import InvalidFileError, ResourceReleaseWarning
from ..log_config import verbose_log
from .models import SlotSnapshot, UploadFile, UploadSlot
from .previews import PreviewRegistry


def validate_file(slot: SlotKey, file: UploadFile) -> None:
    """Raise :class:`InvalidFileError` when ``file`` cannot occupy a slot."""

    if file.size > MAX_FILE_SIZE:
        raise InvalidFileError(
            slot.value,
            InvalidFileError.FILE_TOO_LARGE,
            f"{file.name} is {file.size} bytes; the limit is {MAX_FILE_SIZE} bytes",
        )
    mime_type = (file.mime_type or "").strip().lower()
    if mime_type not in ACCEPTED_MIME_TYPES:
        raise InvalidFileError(
            slot.value,
            InvalidFileError.UNSUPPORTED_TYPE,
            f"{file.name} has unsupported type '{file.mime_type}'",
        )


class SlotStore:
    """Three fixed upload slots, each owning the preview of its file."""

    def __init__(self, previews: Optional[PreviewRegistry] = None) -> None:
        self.previews = previews or PreviewRegistry()
        self._slots: Dict[SlotKey, Optional[UploadSlot]] = {
            key: None for key in SLOT_ORDER
        }

    def __iter__(self) -> Iterator[Tuple[SlotKey, Optional[UploadSlot]]]:
        for key in SLOT_ORDER:
            yield key, self._slots[key]

    def get(self, slot: SlotKey | str) -> Optional[UploadSlot]:
        return self._slots[SlotKey.from_value(slot)]

    def filled(self) -> List[Tuple[SlotKey, UploadSlot]]:
        return [(key, entry) for key, entry in self if entry is not None]

    def snapshot(self, slot: SlotKey | str) -> Optional[SlotSnapshot]:
        key = SlotKey.from_value(slot)
        entry = self._slots[key]
        return SlotSnapshot.from_slot(key, entry) if entry else None

    def assign(
        self, slot: SlotKey | str, file: UploadFile, *, validate: bool = True
    ) -> UploadSlot:
        key = SlotKey.from_value(slot)
        if validate:
            validate_file(key, file)
        self._release(key)
        entry = UploadSlot(
            file=file,
            preview=self.previews.allocate(file),
            progress=0.0,
            status=UploadStatus.PENDING.value,
            time_left=0,
        )
        self._slots[key] = entry
        return entry

    def clear(self, slot: SlotKey | str) -> bool:
        key = SlotKey.from_value(slot)
        if self._slots[key] is None:
            return False
        self._release(key)
        self._slots[key] = None
        return True

    def clear_all(self) -> int:
        return sum(1 for key in SLOT_ORDER if self.clear(key))

    def update(
        self,
        slot: SlotKey,
        *,
        progress: Optional[float] = None,
        status: Optional[str] = None,
        time_left: Optional[int] = None,
    ) -> None:
        entry = self._slots[slot]
        if entry is None:
            return
        if progress is not None:
            entry.progress = progress
        if status is not None:
            entry.status = status
        if time_left is not None:
            entry.time_left = time_left

    def _release(self, key: SlotKey) -> None:
        entry = self._slots[key]
        if entry is None:
            return
        try:
            self.previews.release(entry.preview)
        except Exception as exc:  # noqa: BLE001 - release must not block clearing
            verbose_log(
                "preview_release_failed",
                {"slot": key.value, "preview": entry.preview.url, "error": repr(exc)},
            )
            warnings.warn(
                f"failed to release preview for slot '{key.value}': {exc}",
                ResourceReleaseWarning,
                stacklevel=3,
            )


__all__ = ["SlotStore", "validate_file"]
