"""Derived values computed from slot state on every read."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, List, Optional, Protocol, TypedDict

from ..config import UploadStatus
from ..utils import round_half_up


class SlotLike(Protocol):
    progress: float
    status: str
    time_left: int


class UploadOverviewPayload(TypedDict):
    overall_progress: int
    filled_slots: int
    all_slots_have_files: bool
    all_completed: bool
    is_uploading: bool
    is_paused: bool
    show_start_button: bool
    total_time_left: int


def _filled(slots: Iterable[Optional[SlotLike]]) -> List[SlotLike]:
    return [slot for slot in slots if slot is not None]


def overall_progress(slots: Iterable[Optional[SlotLike]]) -> int:
    filled = _filled(slots)
    if not filled:
        return 0
    return round_half_up(sum(slot.progress for slot in filled) / len(filled))


def all_slots_have_files(slots: Iterable[Optional[SlotLike]]) -> bool:
    return all(slot is not None for slot in slots)


def all_completed(slots: Iterable[Optional[SlotLike]]) -> bool:
    filled = _filled(slots)
    if not filled:
        return False
    return all(slot.status == UploadStatus.COMPLETED.value for slot in filled)


def any_with_status(slots: Iterable[Optional[SlotLike]], status: UploadStatus) -> bool:
    return any(slot.status == status.value for slot in _filled(slots))


def show_start_button(slots: Iterable[Optional[SlotLike]]) -> bool:
    items = list(slots)
    active = any_with_status(items, UploadStatus.UPLOADING) or any_with_status(
        items, UploadStatus.PAUSED
    )
    return all_slots_have_files(items) and not all_completed(items) and not active


def total_time_left(slots: Iterable[Optional[SlotLike]]) -> int:
    return sum(
        slot.time_left
        for slot in _filled(slots)
        if slot.status != UploadStatus.COMPLETED.value
    )


@dataclass(frozen=True)
class UploadOverview:
    overall_progress: int
    filled_slots: int
    all_slots_have_files: bool
    all_completed: bool
    is_uploading: bool
    is_paused: bool
    show_start_button: bool
    total_time_left: int

    @classmethod
    def project(cls, slots: Iterable[Optional[SlotLike]]) -> "UploadOverview":
        items = list(slots)
        return cls(
            overall_progress=overall_progress(items),
            filled_slots=len(_filled(items)),
            all_slots_have_files=all_slots_have_files(items),
            all_completed=all_completed(items),
            is_uploading=any_with_status(items, UploadStatus.UPLOADING),
            is_paused=any_with_status(items, UploadStatus.PAUSED),
            show_start_button=show_start_button(items),
            total_time_left=total_time_left(items),
        )

    def to_payload(self) -> UploadOverviewPayload:
        return UploadOverviewPayload(**asdict(self))


__all__ = [
    "SlotLike",
    "UploadOverview",
    "UploadOverviewPayload",
    "all_completed",
    "all_slots_have_files",
    "any_with_status",
    "overall_progress",
    "show_start_button",
    "total_time_left",
]
