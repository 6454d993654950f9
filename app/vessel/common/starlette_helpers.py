"""Shared Starlette helper utilities used across the Vessel backend."""

from __future__ import annotations

import json
from typing import Any

from marshmallow import Schema, ValidationError  # type: ignore[import-not-found]
from starlette.requests import Request


class RequestValidationError(RuntimeError):
    """Raised when an incoming request payload fails validation."""

    def __init__(
        self,
        errors: dict[str, Any] | None = None,
        *,
        message: str = "Invalid request payload",
    ) -> None:
        super().__init__(message)
        self.errors: dict[str, Any] = dict(errors or {})


async def read_json_body(request: Request) -> Any:
    """Parse the JSON body; undecodable input is reported under the ``json`` key."""

    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise RequestValidationError({"json": "Invalid JSON payload"}) from exc


def load_with_schema(schema: Schema, payload: Any) -> Any:
    """Deserialize ``payload``; marshmallow errors become a 400-mapped RequestValidationError."""

    try:
        return schema.load(payload)
    except ValidationError as exc:
        raise RequestValidationError(exc.normalized_messages()) from exc


def dump_with_schema(schema: Schema, payload: Any) -> Any:
    return schema.dump(payload)


__all__ = [
    "RequestValidationError",
    "read_json_body",
    "load_with_schema",
    "dump_with_schema",
]
