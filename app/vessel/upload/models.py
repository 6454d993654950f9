"""Data models for upload slots."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypedDict

from ..config import SlotKey, UploadStatus
from ..utils import format_bytes


@dataclass(frozen=True)
class UploadFile:
    """File descriptor handed over by the file-selection mechanism."""

    name: str
    size: int
    mime_type: str
    data: bytes = field(default=b"", repr=False)


@dataclass(frozen=True)
class PreviewHandle:
    """Display handle for a slot payload; must be released explicitly."""

    url: str
    file_name: str


@dataclass
class UploadSlot:
    file: UploadFile
    preview: PreviewHandle
    progress: float = 0.0
    status: str = UploadStatus.PENDING.value
    time_left: int = 0


@dataclass
class TaskMetadata:
    """Per-slot simulation parameters, never exposed to consumers."""

    duration_ms: float = 0.0
    paused: bool = False
    ticks: int = 0

    def reset(self, duration_ms: float = 0.0) -> None:
        self.duration_ms = duration_ms
        self.paused = False
        self.ticks = 0


class SlotSnapshotPayload(TypedDict):
    slot: str
    name: str
    size: int
    size_label: str
    mime_type: str
    preview: str
    progress: float
    status: str
    time_left: int


class PersistedSlotPayload(TypedDict, total=False):
    name: str
    size: int


@dataclass(frozen=True)
class SlotSnapshot:
    """Read-only view of a filled slot."""

    slot: SlotKey
    name: str
    size: int
    mime_type: str
    preview: str
    progress: float
    status: str
    time_left: int

    @classmethod
    def from_slot(cls, key: SlotKey, slot: UploadSlot) -> "SlotSnapshot":
        return cls(
            slot=key,
            name=slot.file.name,
            size=slot.file.size,
            mime_type=slot.file.mime_type,
            preview=slot.preview.url,
            progress=slot.progress,
            status=slot.status,
            time_left=slot.time_left,
        )

    def to_payload(self) -> SlotSnapshotPayload:
        return {
            "slot": self.slot.value,
            "name": self.name,
            "size": self.size,
            "size_label": format_bytes(self.size),
            "mime_type": self.mime_type,
            "preview": self.preview,
            "progress": round(self.progress, 2),
            "status": self.status,
            "time_left": self.time_left,
        }


__all__ = [
    "PersistedSlotPayload",
    "PreviewHandle",
    "SlotSnapshot",
    "SlotSnapshotPayload",
    "TaskMetadata",
    "UploadFile",
    "UploadSlot",
]
