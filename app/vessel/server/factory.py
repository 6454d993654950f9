from __future__ import annotations

import asyncio
import random
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional, Tuple

from starlette.applications import Starlette

from ..api.http import register_http_routes
from ..api.websockets import register_websocket_routes
from ..config import (
    DATA_FOLDER,
    PERSISTED_STATE_FILENAME,
    IndicatorMode,
    SocketEvent,
    SocketRoom,
    UploadUpdateReason,
)
from ..indicator import IndicatorStyle, ProgressIndicator, SvgSurface
from ..log_config import verbose_log
from ..sockets import SocketManager
from ..upload import UploadManager, UploadOverview, UploadSettings, UploadStateStore
from ..utils import now_iso


def _connect_indicator(
    manager: UploadManager,
    indicator: ProgressIndicator,
    socket_manager: SocketManager,
    state_store: UploadStateStore,
) -> None:
    """Drive the indicator and persistence from upload notifications."""

    def on_update(reason: str, overview: UploadOverview) -> None:
        if reason == UploadUpdateReason.PAUSED.value:
            indicator.pause()
        elif reason == UploadUpdateReason.STARTED.value:
            if indicator.mode is IndicatorMode.DONE:
                indicator.reset()
            indicator.play()
        elif reason == UploadUpdateReason.RESUMED.value:
            indicator.play()
        elif reason in {
            UploadUpdateReason.RESET.value,
            UploadUpdateReason.CLEARED_ALL.value,
        }:
            indicator.reset()
        indicator.set_progress(overview.overall_progress)

        socket_manager.emit(
            SocketEvent.INDICATOR.value,
            {**indicator.to_payload(), "reason": reason, "timestamp": now_iso()},
            room=SocketRoom.OVERVIEW.value,
        )

        if reason == UploadUpdateReason.TICK.value and overview.all_completed:
            state_store.save(manager.persisted_state())
            verbose_log("upload_state_saved", {"path": str(state_store.path)})

    manager.add_listener(on_update)


def create_app(
    *,
    settings: Optional[UploadSettings] = None,
    rng: Optional[random.Random] = None,
    state_path: Optional[Path] = None,
) -> Tuple[Starlette, UploadManager, ProgressIndicator, SocketManager]:
    """Instantiate the Starlette app along with its supporting managers."""

    socket_manager = SocketManager()
    manager = UploadManager(
        socket_manager,
        settings=settings or UploadSettings.from_environment(),
        rng=rng,
    )
    style = IndicatorStyle()
    indicator = ProgressIndicator(SvgSurface(style.width, style.height), style=style)
    state_store = UploadStateStore(
        state_path or Path(DATA_FOLDER) / PERSISTED_STATE_FILENAME
    )
    _connect_indicator(manager, indicator, socket_manager, state_store)

    @asynccontextmanager
    async def lifespan(_: Starlette) -> AsyncIterator[None]:
        loop = asyncio.get_running_loop()
        socket_manager.bind_loop(loop)
        manager.bind_loop(loop)
        indicator.bind_loop(loop)
        manager.import_persisted(state_store.load())
        try:
            yield
        finally:
            manager.scheduler.stop()
            await socket_manager.aclose()

    app = Starlette(lifespan=lifespan)
    register_http_routes(app, manager, indicator)
    register_websocket_routes(app, manager, indicator, socket_manager)
    app.state.upload_manager = manager
    app.state.indicator = indicator
    app.state.socket_manager = socket_manager
    app.state.state_store = state_store
    return app, manager, indicator, socket_manager


__all__ = ["create_app"]
