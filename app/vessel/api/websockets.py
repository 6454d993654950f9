from __future__ import annotations

from typing import Awaitable, Callable

from starlette.applications import Starlette
from starlette.websockets import WebSocket, WebSocketDisconnect

from ..config import INITIAL_SYNC_REASON, SlotKey, SocketEvent, SocketRoom
from ..exceptions import UnknownSlotError
from ..indicator import ProgressIndicator
from ..models.socket import OverviewPayload, SlotProgressPayload
from ..sockets import SocketManager
from ..upload import UploadManager
from ..utils import now_iso


def register_websocket_routes(
    app: Starlette,
    manager: UploadManager,
    indicator: ProgressIndicator,
    socket_manager: SocketManager,
) -> None:
    """Attach websocket endpoints used by the upload dashboard."""

    def websocket_route(
        path: str,
    ) -> Callable[
        [Callable[[WebSocket], Awaitable[None]]], Callable[[WebSocket], Awaitable[None]]
    ]:
        def decorator(
            func: Callable[[WebSocket], Awaitable[None]],
        ) -> Callable[[WebSocket], Awaitable[None]]:
            app.router.add_websocket_route(path, func)
            return func

        return decorator

    async def _drain(websocket: WebSocket) -> None:
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            pass

    @websocket_route(f"/ws/{SocketRoom.OVERVIEW.value}")
    async def overview_socket(websocket: WebSocket) -> None:
        await websocket.accept()
        socket_manager.subscribe(websocket)
        await websocket.send_json(
            {
                "event": SocketEvent.OVERVIEW.value,
                "payload": OverviewPayload(
                    reason=INITIAL_SYNC_REASON,
                    timestamp=now_iso(),
                    summary=manager.overview(),
                ).to_dict(),
            }
        )
        await websocket.send_json(
            {
                "event": SocketEvent.INDICATOR.value,
                "payload": {
                    **indicator.to_payload(),
                    "reason": INITIAL_SYNC_REASON,
                    "timestamp": now_iso(),
                },
            }
        )
        try:
            await _drain(websocket)
        finally:
            socket_manager.unsubscribe(websocket)

    @websocket_route("/ws/slots/{slot}")
    async def slot_socket(websocket: WebSocket) -> None:
        raw_slot = websocket.path_params.get("slot", "")
        await websocket.accept()
        try:
            key = SlotKey.from_value(raw_slot)
        except UnknownSlotError as exc:
            await websocket.send_json(
                {
                    "event": SocketEvent.ERROR.value,
                    "payload": {"message": str(exc), "slot": exc.slot},
                }
            )
            await websocket.close()
            return

        socket_manager.subscribe(websocket, SocketRoom.for_slot(key.value))
        snapshot = manager.slot(key)
        await websocket.send_json(
            {
                "event": SocketEvent.PROGRESS.value,
                "payload": SlotProgressPayload(
                    reason=INITIAL_SYNC_REASON,
                    timestamp=now_iso(),
                    slot=key.value,
                    name=snapshot.name if snapshot else None,
                    status=snapshot.status if snapshot else None,
                    progress=round(snapshot.progress, 2) if snapshot else None,
                    time_left=snapshot.time_left if snapshot else None,
                ).to_dict(),
            }
        )
        try:
            await _drain(websocket)
        finally:
            socket_manager.unsubscribe(websocket)

    _ = overview_socket
    _ = slot_socket


__all__ = ["register_websocket_routes"]
