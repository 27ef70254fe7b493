from contextlib import asynccontextmanager
from typing import Optional, Sequence
import logging
import sys

import uvicorn
from fastapi import FastAPI

from app.core.config import get_settings
from app.core.logging import setup_logging
from app.websockets.connection_manager import ConnectionManager
from app.websockets.timestamp import router as timestamp_router

settings = get_settings()
setup_logging(settings.log_level)     # also covers `uvicorn main:app`
logger = logging.getLogger(__name__)  # module-specific logger

manager = ConnectionManager()


class TimestampServer(uvicorn.Server):
    """uvicorn server that announces the port once the listener is bound."""

    async def startup(self, sockets=None) -> None:
        await super().startup(sockets=sockets)
        if self.started:
            logger.info("Server started on port: %d", self.config.port)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application-wide startup / shutdown lifecycle hook.

    * Publishes the ConnectionManager at `app.state.conn_mgr` so the
      WebSocket handler can reach it through `get_conn_mgr`.
    * On shutdown closes whatever sockets are still open (1001, going away).
    """
    # ───── expose ConnectionManager early ─────
    app.state.conn_mgr = manager
    logger.info("Server started!")

    # ───────────── application runs ─────────────
    yield

    # ───────────── graceful shutdown ────────────
    if len(manager):
        logger.info("Closing %d open WebSocket connection(s)...", len(manager))
    await manager.close_all()


app = FastAPI(lifespan=lifespan)

app.include_router(timestamp_router)


@app.get("/health", tags=["utils"])
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


def parse_port(argv: Sequence[str], default: int) -> int:
    """
    First positional argument as a TCP port; anything missing, non-numeric
    or outside 0..65535 falls back to *default* without complaint.
    """
    try:
        port = int(argv[0])
    except (IndexError, ValueError):
        return default
    if not 0 <= port <= 65535:
        return default
    return port


def run(argv: Optional[Sequence[str]] = None) -> None:
    """`ts-echo-server [port]` – serve until the process is terminated."""
    if argv is None:
        argv = sys.argv[1:]

    log_level = setup_logging(settings.log_level)
    port = parse_port(argv, settings.port)

    # connection-lost keepalive: ping every N seconds, drop peers that
    # don't answer within another N
    ping = settings.ws_ping_interval
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=port,
        ws_ping_interval=ping,
        ws_ping_timeout=ping,
        log_config=None,
        log_level=log_level,
    )
    server = TimestampServer(config)

    try:
        server.run()
    except SystemExit:
        # uvicorn exits during startup when the listener can't be bound
        logger.error("Server stopped: could not listen on %s:%d", settings.host, port)
        raise


if __name__ == "__main__":
    run()
