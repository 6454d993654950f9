from typing import Dict, List, NotRequired, Optional, TypedDict

from ...indicator.machine import IndicatorStatePayload
from ...upload.aggregate import UploadOverviewPayload
from ...upload.models import SlotSnapshotPayload


class HealthCheckResponse(TypedDict):
    service: str
    time: str
    overview: UploadOverviewPayload
    description: NotRequired[str]
    settings: NotRequired[Dict[str, float]]


class ListSlotsEndpointResponse(TypedDict):
    slots: Dict[str, Optional[SlotSnapshotPayload]]
    summary: UploadOverviewPayload


class SlotEndpointResponse(TypedDict):
    slot: str
    file: Optional[SlotSnapshotPayload]
    summary: UploadOverviewPayload


class UploadCommandResponse(TypedDict):
    action: str
    slots: List[str]
    summary: UploadOverviewPayload
    indicator: NotRequired[IndicatorStatePayload]


class IndicatorEndpointResponse(TypedDict):
    indicator: IndicatorStatePayload
