from .base import SocketPayload
from .progress import OverviewPayload, SlotProgressPayload

__all__ = ["OverviewPayload", "SlotProgressPayload", "SocketPayload"]
