"""Common helpers for typed websocket payloads."""

from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Mapping, Optional, Sequence, cast

from ...models.shared import JSONValue


@dataclass(slots=True)
class SocketPayload:
    """Base dataclass for payloads emitted to websocket clients."""

    reason: Optional[str] = None
    timestamp: Optional[str] = None

    def to_dict(self) -> dict[str, JSONValue]:
        """Return a JSON-serialisable representation of the payload."""

        raw_payload = _strip_none(_convert_payload_value(self))
        if isinstance(raw_payload, dict):
            return raw_payload
        raise TypeError("socket payloads must serialize into mappings")


def _strip_none(value: Any) -> JSONValue:
    """Recursively drop ``None`` values from converted payloads."""

    if isinstance(value, Mapping):
        mapping = cast(Mapping[str, JSONValue], value)
        return {
            key: _strip_none(item) for key, item in mapping.items() if item is not None
        }
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [_strip_none(item) for item in value if item is not None]
    return cast(JSONValue, value)


def _convert_payload_value(value: Any) -> JSONValue:
    """Map dataclass instances and enums into socket-friendly values."""

    if value is None:
        return None
    to_payload = getattr(value, "to_payload", None)
    if callable(to_payload):
        return cast(JSONValue, to_payload())
    if is_dataclass(value) and not isinstance(value, type):
        data: dict[str, JSONValue] = {}
        for field_info in fields(value):
            data[field_info.name] = _convert_payload_value(
                getattr(value, field_info.name)
            )
        return data
    if isinstance(value, Mapping):
        mapping = cast(Mapping[str, Any], value)
        return {key: _convert_payload_value(item) for key, item in mapping.items()}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [_convert_payload_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)):
        value_attr = getattr(value, "value", None)
        if isinstance(value_attr, str):
            return value_attr
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="ignore")
    return str(value)
