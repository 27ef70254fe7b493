"""
ws://<host>:<port>/
===================

Timestamp echo used by clients to estimate round-trip time and clock
offset against this server.

• On open the server sends a *hello* event ``{"c": 0, "ts": <now>}``.

• Every text frame ``{"c": N, ...}`` gets exactly one reply
  ``{"c": N, "ts": <now>}`` on the same socket. ``ts`` is whole Unix
  seconds.

• Malformed frames (not JSON, not an object, no integer ``c``) are logged
  and dropped. The socket stays open and no error frame is sent.

• Binary frames are ignored.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket
from pydantic import ValidationError
from starlette.websockets import WebSocketDisconnect

from app.api.deps import get_conn_mgr
from app.services.timestamp_service import notify, read_counter
from app.websockets.connection_manager import ConnectionManager

router = APIRouter()
log = logging.getLogger(__name__)

# close code recorded when the transport dies without a close frame
ABNORMAL_CLOSURE = 1006


def _log_left(peer: str, code: int, reason: str | None) -> None:
    log.info("%s has left the room! (code=%s, reason=%r)", peer, code, reason or "")


def _peer(ws: WebSocket) -> str:
    if ws.client is None:
        return "<unknown>"
    return f"{ws.client.host}:{ws.client.port}"


def _describe(exc: ValidationError) -> str:
    err = exc.errors(include_url=False)[0]
    loc = ".".join(str(p) for p in err["loc"]) or "<frame>"
    return f"{loc}: {err['msg']}"


@router.websocket("/")
async def timestamp_ws(
        ws: WebSocket,
        mgr: ConnectionManager = Depends(get_conn_mgr),
):
    await mgr.connect(ws)
    peer = _peer(ws)
    log.info("client connected: %s (open: %d)", peer, len(mgr))

    try:
        # hello event: the client's first server-time reference
        await notify(ws, 0)

        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(
                    message.get("code", 1000), message.get("reason")
                )

            text = message.get("text")
            if text is None:
                log.debug("ignoring binary frame from %s", peer)
                continue

            try:
                c = read_counter(text)
            except ValidationError as exc:
                log.warning("dropping malformed frame from %s – %s", peer, _describe(exc))
                continue

            await notify(ws, c)

    except WebSocketDisconnect as exc:
        _log_left(peer, exc.code, exc.reason)
    except Exception:
        log.exception("WebSocket error (%s)", peer)
        _log_left(peer, ABNORMAL_CLOSURE, "connection error")
    finally:
        mgr.disconnect(ws)
