from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Mapping, cast

from starlette import status
from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..common.starlette_helpers import (
    RequestValidationError,
    dump_with_schema,
    load_with_schema,
    read_json_body,
)
from ..config import (
    HEALTH_CHECK_PATH,
    MAX_FILE_SIZE,
    ApiRoute,
    SlotKey,
    get_server_environment,
)
from ..exceptions import InvalidFileError, UnknownSlotError
from ..indicator import ProgressIndicator, SvgSurface
from ..log_config import verbose_log
from ..models.api.errors import ErrorCode
from ..models.api.http import (
    HealthCheckResponse,
    IndicatorEndpointResponse,
    ListSlotsEndpointResponse,
    SlotEndpointResponse,
    UploadCommandResponse,
)
from ..models.shared import JSONValue
from ..upload import UploadFile, UploadManager, UploadSettings
from ..upload.settings import UploadSettingsSchema
from ..utils import now_iso

SERVER_CONFIG = get_server_environment()
FILE_NAME_HEADER = "x-file-name"

Handler = Callable[..., Awaitable[Response]]


def register_http_routes(
    app: Starlette, manager: UploadManager, indicator: ProgressIndicator
) -> None:
    """Attach REST endpoints and middleware to the Starlette application."""

    settings_schema = UploadSettingsSchema()

    def json_response(payload: Any, status: int = 200) -> JSONResponse:
        verbose_log("http_response", {"status": status, "payload": payload})
        return JSONResponse(content=payload, status_code=status)

    def error_response(
        code: ErrorCode | str,
        *,
        status_code: int,
        detail: JSONValue | None = None,
        extra: Mapping[str, JSONValue] | None = None,
    ) -> JSONResponse:
        payload: Dict[str, JSONValue] = {
            "error": code.value if isinstance(code, ErrorCode) else str(code)
        }
        if detail is not None:
            payload["detail"] = detail
        if extra:
            for key, value in extra.items():
                payload[str(key)] = value
        return json_response(payload, status=status_code)

    async def _handle_request_validation(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        detail: JSONValue | None = None
        if exc.errors:
            detail = cast(JSONValue, dict(exc.errors))
        elif exc.args:
            detail = cast(JSONValue, exc.args[0])
        return error_response(
            ErrorCode.INVALID_JSON_PAYLOAD,
            status_code=400,
            detail=detail,
        )

    async def _handle_unknown_slot(_: Request, exc: UnknownSlotError) -> JSONResponse:
        return error_response(
            ErrorCode.SLOT_NOT_FOUND,
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
            extra={"slot": exc.slot},
        )

    async def _handle_invalid_file(_: Request, exc: InvalidFileError) -> JSONResponse:
        return error_response(
            ErrorCode.INVALID_FILE,
            status_code=422,
            detail=str(exc),
            extra={"slot": exc.slot, "reason": exc.reason},
        )

    app.add_exception_handler(RequestValidationError, _handle_request_validation)  # type: ignore[arg-type]
    app.add_exception_handler(UnknownSlotError, _handle_unknown_slot)  # type: ignore[arg-type]
    app.add_exception_handler(InvalidFileError, _handle_invalid_file)  # type: ignore[arg-type]

    def _route(path: str, *, methods: list[str]) -> Callable[[Handler], Handler]:
        def decorator(func: Handler) -> Handler:
            app.router.add_route(path, func, methods=methods)
            return func

        return decorator

    def get(path: str) -> Callable[[Handler], Handler]:
        return _route(path, methods=["GET"])

    def post(path: str) -> Callable[[Handler], Handler]:
        return _route(path, methods=["POST"])

    def put(path: str) -> Callable[[Handler], Handler]:
        return _route(path, methods=["PUT"])

    def delete(path: str) -> Callable[[Handler], Handler]:
        return _route(path, methods=["DELETE"])

    def _slot_key(request: Request) -> SlotKey:
        return SlotKey.from_value(request.path_params.get("slot", ""))

    def _too_large(key: SlotKey, size: int) -> InvalidFileError:
        return InvalidFileError(
            key.value,
            InvalidFileError.FILE_TOO_LARGE,
            f"body is {size} bytes; the limit is {MAX_FILE_SIZE} bytes",
        )

    async def _read_limited_body(request: Request, key: SlotKey) -> bytes:
        """Read the upload body, refusing anything over the file size limit."""

        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > MAX_FILE_SIZE:
            raise _too_large(key, int(declared))
        chunks = bytearray()
        async for chunk in request.stream():
            chunks.extend(chunk)
            if len(chunks) > MAX_FILE_SIZE:
                raise _too_large(key, len(chunks))
        return bytes(chunks)

    def _command_response(action: str, slots: list[SlotKey]) -> JSONResponse:
        response: UploadCommandResponse = {
            "action": action,
            "slots": [key.value for key in slots],
            "summary": manager.overview().to_payload(),
            "indicator": indicator.to_payload(),
        }
        return json_response(response)

    async def log_request(
        request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        body: Any = None
        content_type = request.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            try:
                body = await request.json()
            except Exception:  # noqa: BLE001 - best effort logging
                body = None
        verbose_log(
            "http_request",
            {
                "method": request.method,
                "path": request.url.path,
                "query": dict(request.query_params.multi_items()),
                "json": body,
                "content_type": content_type or None,
            },
        )
        return await call_next(request)

    app.add_middleware(BaseHTTPMiddleware, dispatch=log_request)

    @get(HEALTH_CHECK_PATH)
    async def health_check(request: Request) -> JSONResponse:  # noqa: ARG001 - Starlette route signature
        payload: HealthCheckResponse = {
            "service": SERVER_CONFIG.name,
            "time": now_iso(),
            "overview": manager.overview().to_payload(),
            "description": SERVER_CONFIG.description,
            "settings": dump_with_schema(settings_schema, manager.settings),
        }
        return json_response(payload)

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------
    @get(ApiRoute.SLOTS.value)
    async def list_slots_endpoint(request: Request) -> JSONResponse:  # noqa: ARG001
        response: ListSlotsEndpointResponse = {
            "slots": manager.serialize_slots(),
            "summary": manager.overview().to_payload(),
        }
        return json_response(response)

    @get(ApiRoute.SLOT_DETAIL.value)
    async def get_slot_endpoint(request: Request) -> JSONResponse:
        key = _slot_key(request)
        snapshot = manager.slot(key)
        response: SlotEndpointResponse = {
            "slot": key.value,
            "file": snapshot.to_payload() if snapshot else None,
            "summary": manager.overview().to_payload(),
        }
        return json_response(response)

    @put(ApiRoute.SLOT_DETAIL.value)
    async def upload_slot_endpoint(request: Request) -> JSONResponse:
        """Store the raw request body as the slot's file."""

        key = _slot_key(request)
        data = await _read_limited_body(request, key)
        if not data:
            return error_response(ErrorCode.EMPTY_BODY, status_code=400)
        mime_type = request.headers.get("content-type", "").split(";")[0].strip()
        name = (
            request.headers.get(FILE_NAME_HEADER)
            or request.query_params.get("name")
            or key.value
        ).strip()
        upload = UploadFile(
            name=name or key.value,
            size=len(data),
            mime_type=mime_type.lower(),
            data=data,
        )
        snapshot = manager.assign(key, upload)
        response: SlotEndpointResponse = {
            "slot": key.value,
            "file": snapshot.to_payload(),
            "summary": manager.overview().to_payload(),
        }
        return json_response(response, status=201)

    @delete(ApiRoute.SLOT_DETAIL.value)
    async def clear_slot_endpoint(request: Request) -> JSONResponse:
        key = _slot_key(request)
        if not manager.clear(key):
            return error_response(
                ErrorCode.SLOT_EMPTY,
                status_code=status.HTTP_404_NOT_FOUND,
                extra={"slot": key.value},
            )
        response: SlotEndpointResponse = {
            "slot": key.value,
            "file": None,
            "summary": manager.overview().to_payload(),
        }
        return json_response(response)

    @delete(ApiRoute.SLOTS.value)
    async def clear_slots_endpoint(request: Request) -> JSONResponse:  # noqa: ARG001
        removed = manager.clear_all()
        return json_response(
            {"removed": removed, "summary": manager.overview().to_payload()}
        )

    # ------------------------------------------------------------------
    # Upload lifecycle
    # ------------------------------------------------------------------
    @post(ApiRoute.UPLOAD_START.value)
    async def start_upload_endpoint(request: Request) -> JSONResponse:  # noqa: ARG001
        started = manager.start_upload()
        if not started:
            return error_response(
                ErrorCode.NOTHING_TO_START, status_code=status.HTTP_409_CONFLICT
            )
        return _command_response("start", started)

    @post(ApiRoute.UPLOAD_PAUSE.value)
    async def pause_upload_endpoint(request: Request) -> JSONResponse:  # noqa: ARG001
        return _command_response("pause", manager.pause_all())

    @post(ApiRoute.UPLOAD_RESUME.value)
    async def resume_upload_endpoint(request: Request) -> JSONResponse:  # noqa: ARG001
        return _command_response("resume", manager.resume_all())

    @post(ApiRoute.UPLOAD_RESET.value)
    async def reset_upload_endpoint(request: Request) -> JSONResponse:  # noqa: ARG001
        return _command_response("reset", manager.reset_upload())

    @get(ApiRoute.UPLOAD_SETTINGS.value)
    async def get_settings_endpoint(request: Request) -> JSONResponse:  # noqa: ARG001
        return json_response(dump_with_schema(settings_schema, manager.settings))

    @put(ApiRoute.UPLOAD_SETTINGS.value)
    async def update_settings_endpoint(request: Request) -> JSONResponse:
        raw_body = await read_json_body(request)
        if not isinstance(raw_body, Mapping):
            raise RequestValidationError({"json": "JSON object required"})
        settings = cast(UploadSettings, load_with_schema(settings_schema, raw_body))
        if not manager.apply_settings(settings):
            return error_response(
                ErrorCode.UPLOAD_ACTIVE, status_code=status.HTTP_409_CONFLICT
            )
        return json_response(dump_with_schema(settings_schema, settings))

    # ------------------------------------------------------------------
    # Indicator
    # ------------------------------------------------------------------
    def _indicator_response() -> JSONResponse:
        response: IndicatorEndpointResponse = {"indicator": indicator.to_payload()}
        return json_response(response)

    @get(ApiRoute.INDICATOR.value)
    async def get_indicator_endpoint(request: Request) -> JSONResponse:  # noqa: ARG001
        return _indicator_response()

    @get(ApiRoute.INDICATOR_SVG.value)
    async def get_indicator_svg_endpoint(request: Request) -> Response:  # noqa: ARG001
        surface = indicator.surface
        if not isinstance(surface, SvgSurface):
            return error_response(
                ErrorCode.SVG_UNAVAILABLE, status_code=status.HTTP_404_NOT_FOUND
            )
        return Response(surface.to_svg(), media_type="image/svg+xml")

    @post(ApiRoute.INDICATOR_PLAY.value)
    async def play_indicator_endpoint(request: Request) -> JSONResponse:  # noqa: ARG001
        indicator.play()
        return _indicator_response()

    @post(ApiRoute.INDICATOR_PAUSE.value)
    async def pause_indicator_endpoint(request: Request) -> JSONResponse:  # noqa: ARG001
        indicator.pause()
        return _indicator_response()

    @post(ApiRoute.INDICATOR_RESET.value)
    async def reset_indicator_endpoint(request: Request) -> JSONResponse:  # noqa: ARG001
        indicator.reset()
        return _indicator_response()


__all__ = ["register_http_routes"]
