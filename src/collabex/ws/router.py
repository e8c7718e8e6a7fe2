"""Authenticated WebSocket endpoint for per-user real-time events.

Server -> client frames are ``{"type": "notification" | "message", "payload": {...}}``.
Clients may only ``{"action": "ping"}`` to keep the socket alive.
"""

import json
import uuid

import jwt
import structlog
from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from collabex.auth.jwt import verify_token
from collabex.ws.manager import manager

logger = structlog.get_logger()

router = APIRouter()

AUTH_FAILED_CLOSE_CODE = 4001


def _reply(raw: str) -> dict:
    try:
        msg = json.loads(raw)
    except json.JSONDecodeError:
        return {"type": "error", "message": "Invalid JSON"}
    action = msg.get("action") if isinstance(msg, dict) else None
    if action == "ping":
        return {"type": "pong"}
    return {"type": "error", "message": f"Unknown action: {action}"}


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, token: str = Query(...)) -> None:
    try:
        claims = verify_token(token)
    except jwt.InvalidTokenError:
        await websocket.close(code=AUTH_FAILED_CLOSE_CODE, reason="Authentication failed")
        return

    conn_id = uuid.uuid4().hex
    # Publishers address users by canonical UUID text
    await manager.connect(websocket, conn_id, str(uuid.UUID(claims["sub"])))
    try:
        while True:
            await websocket.send_json(_reply(await websocket.receive_text()))
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("ws_error", conn_id=conn_id)
    finally:
        await manager.disconnect(conn_id)
