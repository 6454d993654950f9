from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Canonical error identifiers shared across HTTP and websocket APIs."""

    SLOT_NOT_FOUND = "slot_not_found"
    SLOT_EMPTY = "slot_empty"
    INVALID_FILE = "invalid_file"
    EMPTY_BODY = "empty_body"
    NOTHING_TO_START = "nothing_to_start"
    UPLOAD_ACTIVE = "upload_active"
    SVG_UNAVAILABLE = "svg_unavailable"
    INVALID_JSON_PAYLOAD = "invalid_json_payload"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return str(self.value)


__all__ = ["ErrorCode"]
