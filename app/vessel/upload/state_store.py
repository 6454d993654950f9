from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Dict, Mapping, cast

from marshmallow import ValidationError, fields, validate

from ..config import PLACEHOLDER_FILE_SIZE, SlotKey
from ..exceptions import UnknownSlotError
from ..log_config import verbose_log
from ..models.shared import JSONValue
from ..schemas.base import VesselSchema
from .models import PersistedSlotPayload

PersistedSlots = Dict[SlotKey, PersistedSlotPayload]


class PersistedSlotSchema(VesselSchema):
    name = fields.String(required=True, validate=validate.Length(min=1))
    size = fields.Integer(
        load_default=PLACEHOLDER_FILE_SIZE, validate=validate.Range(min=0)
    )


def _extract_slot_payloads(decoded: JSONValue) -> Mapping[str, JSONValue]:
    """Accept both ``{"slots": {...}}`` and the bare ``{slot: {...}}`` layout."""

    if not isinstance(decoded, dict):
        return {}
    nested = decoded.get("slots")
    if isinstance(nested, dict):
        return nested
    return decoded


def parse_persisted_slots(raw: Mapping[str, JSONValue]) -> PersistedSlots:
    schema = PersistedSlotSchema()
    parsed: PersistedSlots = {}
    for slot_name, entry in raw.items():
        if entry is None:
            continue
        try:
            key = SlotKey.from_value(slot_name)
            parsed[key] = cast(PersistedSlotPayload, schema.load(entry))
        except (UnknownSlotError, ValidationError) as exc:
            verbose_log(
                "state_store_entry_invalid",
                {"slot": slot_name, "error": repr(exc)},
            )
    return parsed


class UploadStateStore:
    """Persists completed slot placeholders (name and size) to disk."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.RLock()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except Exception as exc:  # noqa: BLE001 - best effort directory creation
            verbose_log(
                "state_store_mkdir_failed",
                {"path": str(self._path.parent), "error": repr(exc)},
            )

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> PersistedSlots:
        with self._lock:
            if not self._path.exists():
                return {}
            try:
                raw = self._path.read_text(encoding="utf-8")
            except Exception as exc:  # noqa: BLE001
                verbose_log(
                    "state_store_load_failed",
                    {"path": str(self._path), "error": repr(exc)},
                )
                return {}
        if not raw.strip():
            return {}
        try:
            decoded = cast(JSONValue, json.loads(raw))
        except Exception as exc:  # noqa: BLE001
            verbose_log(
                "state_store_decode_failed",
                {"path": str(self._path), "error": repr(exc)},
            )
            return {}
        return parse_persisted_slots(_extract_slot_payloads(decoded))

    def save(self, slots: PersistedSlots) -> None:
        payload = {
            "slots": {key.value: dict(entry) for key, entry in slots.items()}
        }
        try:
            serialized = json.dumps(payload, ensure_ascii=False, indent=2)
        except Exception as exc:  # noqa: BLE001
            verbose_log("state_store_encode_failed", {"error": repr(exc)})
            return

        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with self._lock:
            try:
                tmp_path.write_text(serialized, encoding="utf-8")
                tmp_path.replace(self._path)
            except Exception as exc:  # noqa: BLE001
                verbose_log(
                    "state_store_save_failed",
                    {"path": str(self._path), "error": repr(exc)},
                )
                try:
                    if tmp_path.exists():
                        tmp_path.unlink()
                except OSError:
                    pass


__all__ = [
    "PersistedSlotSchema",
    "PersistedSlots",
    "UploadStateStore",
    "parse_persisted_slots",
]
