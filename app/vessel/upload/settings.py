"""Upload simulation settings (``{tickMs, minSeconds, maxSeconds}``)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, cast

from marshmallow import ValidationError, fields, post_load, validate, validates_schema

from ..config import get_server_environment
from ..exceptions import InvalidSettingsError
from ..schemas.base import VesselSchema

DEFAULT_TICK_MS = 120.0
DEFAULT_MIN_SECONDS = 10.0
DEFAULT_MAX_SECONDS = 15.0


@dataclass(frozen=True)
class UploadSettings:
    tick_ms: float = DEFAULT_TICK_MS
    min_seconds: float = DEFAULT_MIN_SECONDS
    max_seconds: float = DEFAULT_MAX_SECONDS

    @classmethod
    def from_mapping(cls, payload: Optional[Mapping[str, Any]]) -> "UploadSettings":
        """Validate a camelCase config object; missing keys keep their defaults."""
        try:
            loaded = UploadSettingsSchema().load(dict(payload or {}))
        except ValidationError as exc:
            raise InvalidSettingsError(exc.normalized_messages()) from exc
        return cast(UploadSettings, loaded)

    @classmethod
    def from_environment(cls) -> "UploadSettings":
        env = get_server_environment()
        return cls.from_mapping(
            {
                "tickMs": env.tick_ms,
                "minSeconds": env.min_seconds,
                "maxSeconds": env.max_seconds,
            }
        )


class UploadSettingsSchema(VesselSchema):
    tick_ms = fields.Float(
        load_default=DEFAULT_TICK_MS,
        validate=validate.Range(min=0, min_inclusive=False),
    )
    min_seconds = fields.Float(
        load_default=DEFAULT_MIN_SECONDS, validate=validate.Range(min=0)
    )
    max_seconds = fields.Float(
        load_default=DEFAULT_MAX_SECONDS, validate=validate.Range(min=0)
    )

    @validates_schema
    def _check_range(self, data: Mapping[str, Any], **_: Any) -> None:
        minimum = data.get("min_seconds", DEFAULT_MIN_SECONDS)
        maximum = data.get("max_seconds", DEFAULT_MAX_SECONDS)
        if minimum > maximum:
            raise ValidationError(
                "minSeconds must not exceed maxSeconds", field_name="minSeconds"
            )

    @post_load
    def _build(self, data: Mapping[str, Any], **_: Any) -> UploadSettings:
        return UploadSettings(**data)


__all__ = ["UploadSettings", "UploadSettingsSchema"]
