"""Typed payload definitions for upload progress updates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from .base import SocketPayload

if TYPE_CHECKING:  # pragma: no cover - only used for type hints
    from ...upload.aggregate import UploadOverview


@dataclass(slots=True)
class SlotProgressPayload(SocketPayload):
    """Progress of one slot as reported to websocket clients."""

    slot: str = ""
    name: Optional[str] = None
    status: Optional[str] = None
    progress: Optional[float] = None
    time_left: Optional[int] = None


@dataclass(slots=True)
class OverviewPayload(SocketPayload):
    """Aggregate upload state broadcast to the overview room."""

    summary: Optional[UploadOverview] = None
