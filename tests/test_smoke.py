"""
End-to-end tests over the real ASGI app — run with  `pytest -q`

The TestClient is used as a context manager so the lifespan hook runs and
publishes the ConnectionManager on `app.state`.
"""

import json
import logging
import time

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

import app.services.timestamp_service as ts_service
from main import app


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def assert_recent(ts: int, slack: float = 2.0) -> None:
    assert isinstance(ts, int)
    assert abs(ts - time.time()) <= slack


def test_health_ok(client) -> None:
    """Health check endpoint responds 200 with expected JSON."""
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_hello_event_first(client) -> None:
    with client.websocket_connect("/") as ws:
        hello = ws.receive_json()
    assert hello["c"] == 0
    assert set(hello) == {"c", "ts"}
    assert_recent(hello["ts"])


def test_hello_is_compact_json(client) -> None:
    with client.websocket_connect("/") as ws:
        raw = ws.receive_text()
    assert " " not in raw
    assert json.loads(raw)["c"] == 0


@pytest.mark.parametrize("c", [7, 1, -5, 2147483647, -2147483648])
def test_echo_counter(client, c: int) -> None:
    with client.websocket_connect("/") as ws:
        ws.receive_json()
        ws.send_json({"c": c})
        reply = ws.receive_json()
    assert reply["c"] == c
    assert_recent(reply["ts"])


def test_extra_fields_dropped_from_reply(client) -> None:
    with client.websocket_connect("/") as ws:
        ws.receive_json()
        ws.send_json({"c": 3, "payload": "ignored"})
        reply = ws.receive_json()
    assert reply["c"] == 3
    assert "payload" not in reply


@pytest.mark.parametrize(
    "frame",
    [
        "not json",
        "[1, 2, 3]",
        "42",
        "{}",
        '{"payload": 1}',
        '{"c": "7"}',
        '{"c": 7.5}',
        '{"c": true}',
        '{"c": null}',
        '{"c": 2147483648}',
    ],
)
def test_malformed_frame_is_dropped(client, caplog, frame: str) -> None:
    caplog.set_level(logging.WARNING, logger="app.websockets.timestamp")
    with client.websocket_connect("/") as ws:
        ws.receive_json()
        ws.send_text(frame)
        ws.send_json({"c": 9})
        # the very next frame answers the good message, so the bad one got nothing
        reply = ws.receive_json()
    assert reply["c"] == 9
    assert any("dropping malformed frame" in r.getMessage() for r in caplog.records)


def test_connection_survives_many_bad_frames(client) -> None:
    with client.websocket_connect("/") as ws:
        ws.receive_json()
        for _ in range(5):
            ws.send_text("not json")
        ws.send_json({"c": 11})
        assert ws.receive_json()["c"] == 11


def test_replies_in_order_with_non_decreasing_ts(client, monkeypatch) -> None:
    clock = iter(range(1_700_000_000, 1_700_000_100))
    monkeypatch.setattr(ts_service, "get_timestamp", lambda: next(clock))

    with client.websocket_connect("/") as ws:
        events = [ws.receive_json()]
        for c in range(1, 6):
            ws.send_json({"c": c})
        events += [ws.receive_json() for _ in range(5)]

    assert [e["c"] for e in events] == [0, 1, 2, 3, 4, 5]
    stamps = [e["ts"] for e in events]
    assert stamps == sorted(stamps)


def test_connections_are_independent(client) -> None:
    with client.websocket_connect("/") as a, client.websocket_connect("/") as b:
        assert a.receive_json()["c"] == 0
        assert b.receive_json()["c"] == 0

        a.send_json({"c": 5})
        b.send_json({"c": 6})
        assert b.receive_json()["c"] == 6
        assert a.receive_json()["c"] == 5

        b.send_json({"c": 8})
        assert b.receive_json()["c"] == 8
        a.send_json({"c": 4})
        assert a.receive_json()["c"] == 4


def test_shutdown_closes_open_socket_with_going_away() -> None:
    with TestClient(app) as c:
        session = c.websocket_connect("/")
        ws = session.__enter__()
        assert ws.receive_json()["c"] == 0
    # leaving the client ran the lifespan shutdown while `ws` was still open
    try:
        with pytest.raises(WebSocketDisconnect) as exc:
            ws.receive_text()
        assert exc.value.code == 1001
    finally:
        session.__exit__(None, None, None)
