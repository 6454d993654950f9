"""Application entrypoint for running the Vessel backend locally."""

from __future__ import annotations

import traceback

from vessel.config import DEFAULT_HOST, DEFAULT_LOG_LEVEL, DEFAULT_PORT
from vessel.log_config import verbose_log


def run(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    log_level: str = DEFAULT_LOG_LEVEL,
) -> None:
    """Run the ASGI application using Uvicorn."""

    import uvicorn

    from vessel.app import app

    verbose_log("server_starting", {"host": host, "port": port})
    uvicorn.run(app, host=host, port=port, log_level=log_level)


def main() -> None:
    try:
        run()
    except Exception:
        print("--- Fatal error during application startup ---", flush=True)
        traceback.print_exc()
        raise


if __name__ == "__main__":
    main()
