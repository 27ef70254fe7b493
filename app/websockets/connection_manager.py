# app/websockets/connection_manager.py
"""
ConnectionManager
=================

Keeps track of every open WebSocket on the timestamp endpoint so the
process can report how many peers it has and close them on shutdown.
It never fans messages out: replies go only to the socket that asked.

Typical FastAPI usage
---------------------
    mgr: ConnectionManager = Depends(get_conn_mgr)

    await mgr.connect(ws)        # on socket open
    ...
    mgr.disconnect(ws)           # in the finally block
"""

from __future__ import annotations

import logging
from typing import Set

from fastapi.websockets import WebSocket
from starlette import status

log = logging.getLogger(__name__)


class ConnectionManager:
    # ─────────────────────────── lifecycle ────────────────────────────
    def __init__(self) -> None:
        self._active: Set[WebSocket] = set()

    async def connect(self, ws: WebSocket) -> None:
        """Accept *ws* and add it to the pool."""
        await ws.accept()
        self._active.add(ws)

    def disconnect(self, ws: WebSocket) -> None:
        """Forget *ws*; unknown sockets are ignored."""
        self._active.discard(ws)

    def __len__(self) -> int:
        return len(self._active)

    def __contains__(self, ws: WebSocket) -> bool:
        return ws in self._active

    # ─────────────────────────── shutdown ────────────────────────────
    async def close_all(self, code: int = status.WS_1001_GOING_AWAY) -> None:
        """Close every registered socket with *code*."""
        for ws in list(self._active):
            try:
                await ws.close(code=code)
            except Exception as exc:
                # peer already gone; nothing left to close
                log.debug("close failed for %r: %s", ws, exc)
            self.disconnect(ws)
