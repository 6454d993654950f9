from __future__ import annotations

import asyncio
import threading
from typing import Any, Dict, List, Optional, Set

from starlette.websockets import WebSocket, WebSocketState

from ..config import SocketRoom
from ..log_config import verbose_log

OVERVIEW_ROOM = SocketRoom.OVERVIEW.value


class SocketManager:
    """Fans upload events out to websocket rooms.

    Every socket joins one or more rooms: ``overview`` for batch-wide events
    and ``slot:<name>`` for a single slot. Emission may happen from any thread;
    sends are scheduled on the bound loop.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._rooms: Dict[str, Set[WebSocket]] = {}
        self._closed = False

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        with self._lock:
            self._loop = loop

    def subscribe(self, websocket: WebSocket, room: str = OVERVIEW_ROOM) -> None:
        with self._lock:
            if self._closed:
                return
            self._rooms.setdefault(room, set()).add(websocket)

    def unsubscribe(self, websocket: WebSocket, room: Optional[str] = None) -> None:
        """Leave ``room``, or every room when none is given."""
        with self._lock:
            rooms = [room] if room is not None else list(self._rooms)
            for name in rooms:
                members = self._rooms.get(name)
                if members is None:
                    continue
                members.discard(websocket)
                if not members:
                    del self._rooms[name]

    def subscriber_count(self, room: str = OVERVIEW_ROOM) -> int:
        with self._lock:
            return len(self._rooms.get(room, ()))

    def emit(self, event: str, payload: Any, *, room: Optional[str] = None) -> None:
        """Queue ``{event, payload}`` for every open socket in ``room`` (overview by default)."""
        with self._lock:
            loop = self._loop
            if self._closed or loop is None or loop.is_closed():
                return
            targets = self._open_members(room or OVERVIEW_ROOM)
        message = {"event": event, "payload": payload}
        for websocket in targets:
            try:
                loop.call_soon_threadsafe(self._schedule_send, websocket, message)
            except RuntimeError:
                self.unsubscribe(websocket)

    async def aclose(self) -> None:
        """Close every tracked socket; later emissions are dropped."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            sockets: Set[WebSocket] = set()
            for members in self._rooms.values():
                sockets.update(members)
            self._rooms.clear()
        for websocket in sockets:
            try:
                await websocket.close()
            except RuntimeError:
                continue
            except Exception as exc:  # noqa: BLE001 - best effort shutdown
                verbose_log("socket_close_failed", {"error": repr(exc)})
        with self._lock:
            self._loop = None

    def _open_members(self, room: str) -> List[WebSocket]:
        alive: List[WebSocket] = []
        for websocket in list(self._rooms.get(room, ())):
            if self._is_open(websocket):
                alive.append(websocket)
            else:
                self.unsubscribe(websocket)
        return alive

    def _schedule_send(self, websocket: WebSocket, message: Dict[str, Any]) -> None:
        if not self._is_open(websocket):
            self.unsubscribe(websocket)
            return
        asyncio.create_task(self._send(websocket, message))

    async def _send(self, websocket: WebSocket, message: Dict[str, Any]) -> None:
        try:
            await websocket.send_json(message)
        except Exception:  # noqa: BLE001 - drop the socket
            verbose_log("socket_send_failed", {"event": message.get("event")})
            self.unsubscribe(websocket)

    @staticmethod
    def _is_open(websocket: WebSocket) -> bool:
        for attribute in ("client_state", "application_state"):
            state = getattr(websocket, attribute, None)
            if state is not None and state != WebSocketState.CONNECTED:
                return False
        return True


__all__ = ["SocketManager"]
