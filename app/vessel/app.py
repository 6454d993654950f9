"""Application bootstrap for the Vessel backend."""

from __future__ import annotations

from starlette.applications import Starlette

from .indicator import ProgressIndicator
from .server import create_app
from .sockets import SocketManager
from .upload import UploadManager

_app: Starlette
_manager: UploadManager
_indicator: ProgressIndicator
_socket_manager: SocketManager
_app, _manager, _indicator, _socket_manager = create_app()
app = _app


__all__ = ["app", "create_app", "_manager", "_indicator", "_socket_manager"]
