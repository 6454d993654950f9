from __future__ import annotations

from enum import Enum
from typing import Final, FrozenSet, Tuple

from ..exceptions import UnknownSlotError
from .environment import get_server_environment

# ---------------------------------------------------------------------------
# Application bootstrap defaults
# ---------------------------------------------------------------------------
_SERVER_ENV = get_server_environment()

DEFAULT_HOST: Final[str] = _SERVER_ENV.host
DEFAULT_PORT: Final[int] = _SERVER_ENV.port
DEFAULT_LOG_LEVEL: Final[str] = _SERVER_ENV.log_level
DATA_FOLDER: Final[str] = _SERVER_ENV.data_folder
CACHE_FOLDER: Final[str] = _SERVER_ENV.cache_folder

# ---------------------------------------------------------------------------
# API routing conventions
# ---------------------------------------------------------------------------
API_PREFIX: Final[str] = "/api"
HEALTH_CHECK_PATH: Final[str] = "/"


class ApiRoute(str, Enum):
    SLOTS = f"{API_PREFIX}/slots"
    SLOT_DETAIL = f"{API_PREFIX}/slots/{{slot}}"
    UPLOAD_START = f"{API_PREFIX}/upload/start"
    UPLOAD_PAUSE = f"{API_PREFIX}/upload/pause"
    UPLOAD_RESUME = f"{API_PREFIX}/upload/resume"
    UPLOAD_RESET = f"{API_PREFIX}/upload/reset"
    UPLOAD_SETTINGS = f"{API_PREFIX}/upload/settings"
    INDICATOR = f"{API_PREFIX}/indicator"
    INDICATOR_SVG = f"{API_PREFIX}/indicator/svg"
    INDICATOR_PLAY = f"{API_PREFIX}/indicator/play"
    INDICATOR_PAUSE = f"{API_PREFIX}/indicator/pause"
    INDICATOR_RESET = f"{API_PREFIX}/indicator/reset"


# ---------------------------------------------------------------------------
# Slot lifecycle constants
# ---------------------------------------------------------------------------
class SlotKey(str, Enum):
    FIRST = "first"
    SECOND = "second"
    THIRD = "third"

    @classmethod
    def from_value(cls, value: "SlotKey | str") -> "SlotKey":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        raise UnknownSlotError(value)


SLOT_ORDER: Final[Tuple[SlotKey, ...]] = (SlotKey.FIRST, SlotKey.SECOND, SlotKey.THIRD)


class UploadStatus(str, Enum):
    PENDING = "pending"
    UPLOADING = "uploading"
    PAUSED = "paused"
    COMPLETED = "completed"


ACTIVE_STATUSES: Final[FrozenSet[str]] = frozenset(
    {UploadStatus.UPLOADING.value, UploadStatus.PAUSED.value}
)


class UploadUpdateReason(str, Enum):
    ASSIGNED = "assigned"
    CLEARED = "cleared"
    CLEARED_ALL = "cleared_all"
    STARTED = "started"
    TICK = "tick"
    PAUSED = "paused"
    RESUMED = "resumed"
    RESET = "reset"
    RESTORED = "restored"


# ---------------------------------------------------------------------------
# File acceptance rules
# ---------------------------------------------------------------------------
MAX_FILE_SIZE: Final[int] = 20 * 1024 * 1024
ACCEPTED_MIME_TYPES: Final[FrozenSet[str]] = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/webp"}
)
PLACEHOLDER_MIME_TYPE: Final[str] = "image/jpeg"
PLACEHOLDER_FILE_SIZE: Final[int] = 2_500_000
PERSISTED_STATE_FILENAME: Final[str] = "uploaded_images.json"


# ---------------------------------------------------------------------------
# Progress indicator
# ---------------------------------------------------------------------------
class IndicatorMode(str, Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    DONE = "done"


class SweepDirection(str, Enum):
    LTR = "ltr"
    RTL = "rtl"


INDICATOR_POINTS: Final[int] = 28
INDICATOR_WIDTH: Final[float] = 320.0
INDICATOR_HEIGHT: Final[float] = 48.0
INDICATOR_COLORS: Final[dict[IndicatorMode, str]] = {
    IndicatorMode.PLAYING: "#7c3aed",
    IndicatorMode.PAUSED: "#9ca3af",
    IndicatorMode.DONE: "#22c55e",
}
WHIP_DURATION_SECONDS: Final[float] = 0.9
WHIP_TENSION: Final[float] = 0.65
WHIP_BEND: Final[float] = 18.0
WHIP_SHARPNESS: Final[float] = 2.0
FRAME_INTERVAL_SECONDS: Final[float] = 1 / 60


# ---------------------------------------------------------------------------
# Websocket events and routing
# ---------------------------------------------------------------------------
class SocketEvent(str, Enum):
    OVERVIEW = "overview"
    PROGRESS = "progress"
    INDICATOR = "indicator"
    ERROR = "error"


class SocketRoom(str, Enum):
    OVERVIEW = "overview"
    SLOT_PREFIX = "slot:"

    @classmethod
    def for_slot(cls, slot: str) -> str:
        return f"{cls.SLOT_PREFIX.value}{slot}"


INITIAL_SYNC_REASON: Final[str] = "initial_sync"


__all__ = [
    "ACCEPTED_MIME_TYPES",
    "ACTIVE_STATUSES",
    "API_PREFIX",
    "ApiRoute",
    "CACHE_FOLDER",
    "DATA_FOLDER",
    "DEFAULT_HOST",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_PORT",
    "FRAME_INTERVAL_SECONDS",
    "HEALTH_CHECK_PATH",
    "INDICATOR_COLORS",
    "INDICATOR_HEIGHT",
    "INDICATOR_POINTS",
    "INDICATOR_WIDTH",
    "INITIAL_SYNC_REASON",
    "IndicatorMode",
    "MAX_FILE_SIZE",
    "PERSISTED_STATE_FILENAME",
    "PLACEHOLDER_FILE_SIZE",
    "PLACEHOLDER_MIME_TYPE",
    "SLOT_ORDER",
    "SlotKey",
    "SocketEvent",
    "SocketRoom",
    "SweepDirection",
    "UploadStatus",
    "UploadUpdateReason",
    "WHIP_BEND",
    "WHIP_DURATION_SECONDS",
    "WHIP_SHARPNESS",
    "WHIP_TENSION",
]
