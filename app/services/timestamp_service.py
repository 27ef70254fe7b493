"""
Builds and reads the two-field ``{"c", "ts"}`` events exchanged on ``/``.
"""

from __future__ import annotations

import time

from fastapi import WebSocket

from app.schemas.ws import CounterMessage, TimestampEvent


def get_timestamp() -> int:
    """Current Unix time in whole seconds (not milliseconds)."""
    return int(time.time() * 1000) // 1000


def get_event(c: int) -> str:
    """JSON text for the event acknowledging counter *c*."""
    return TimestampEvent(c=c, ts=get_timestamp()).model_dump_json()


def read_counter(text: str) -> int:
    """
    Pull ``c`` out of an inbound frame.

    Raises ``pydantic.ValidationError`` for anything that is not a JSON
    object carrying an in-range integer ``c``.
    """
    return CounterMessage.model_validate_json(text).c


async def notify(ws: WebSocket, c: int) -> None:
    """Send *ws* the event for counter *c*."""
    await ws.send_text(get_event(c))
