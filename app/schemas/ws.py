from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


class TimestampEvent(BaseModel):
    """
    Outbound frame, one per hello / reply.

    c  : int – counter being acknowledged (0 for the hello event)
    ts : int – server Unix time, whole seconds
    """
    c: int
    ts: int


class CounterMessage(BaseModel):
    """
    Inbound frame. Only ``c`` is read; any other key is ignored.

    ``c`` must be a JSON integer that fits a signed 32-bit int. Strings,
    booleans and floats (even ``7.0``) are rejected.
    """
    model_config = ConfigDict(extra="ignore")

    c: int = Field(strict=True, ge=INT32_MIN, le=INT32_MAX)
