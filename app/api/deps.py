# api/deps.py
from fastapi.websockets import WebSocket

from app.websockets.connection_manager import ConnectionManager


def get_conn_mgr(ws: WebSocket) -> ConnectionManager:
    return ws.app.state.conn_mgr
