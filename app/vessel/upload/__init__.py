from .aggregate import UploadOverview
from .manager import UploadListener, UploadManager
from .models import (
    PreviewHandle,
    SlotSnapshot,
    TaskMetadata,
    UploadFile,
    UploadSlot,
)
from .previews import PreviewRegistry
from .scheduler import SchedulerState, TickScheduler
from .settings import UploadSettings
from .slot_store import SlotStore, validate_file
from .state_store import UploadStateStore

__all__ = [
    "PreviewHandle",
    "PreviewRegistry",
    "SchedulerState",
    "SlotSnapshot",
    "SlotStore",
    "TaskMetadata",
    "TickScheduler",
    "UploadFile",
    "UploadListener",
    "UploadManager",
    "UploadOverview",
    "UploadSettings",
    "UploadSlot",
    "UploadStateStore",
    "validate_file",
]
