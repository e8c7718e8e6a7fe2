"""Per-user WebSocket registry.

Every real-time event is addressed to exactly one user (a new notification or
direct message), so sockets are grouped by user id and there are no shared
channels to subscribe to.
"""

import json
import time
from dataclasses import dataclass, field

import structlog
from fastapi import WebSocket

logger = structlog.get_logger()


@dataclass
class ClientConnection:
    websocket: WebSocket
    user_id: str
    connected_at: float = field(default_factory=time.time)
    messages_sent: int = 0


class ConnectionManager:
    """Holds open sockets for the lifetime of the process.

    All mutation happens on the event loop, so no locking is needed.
    """

    def __init__(self) -> None:
        self._sockets_by_user: dict[str, dict[str, ClientConnection]] = {}
        self._owner_of: dict[str, str] = {}  # conn_id -> user_id

    @property
    def connection_count(self) -> int:
        return len(self._owner_of)

    async def connect(self, websocket: WebSocket, conn_id: str, user_id: str) -> None:
        await websocket.accept()
        self._sockets_by_user.setdefault(user_id, {})[conn_id] = ClientConnection(websocket, user_id)
        self._owner_of[conn_id] = user_id
        logger.info("ws_connected", conn_id=conn_id, user_id=user_id)

    async def disconnect(self, conn_id: str) -> None:
        """Forget a connection; unknown ids are ignored."""
        user_id = self._owner_of.pop(conn_id, None)
        if user_id is None:
            return
        sockets = self._sockets_by_user[user_id]
        sockets.pop(conn_id, None)
        if not sockets:
            del self._sockets_by_user[user_id]
        logger.info("ws_disconnected", conn_id=conn_id, user_id=user_id)

    async def send_to_user_direct(self, user_id: str, message: dict) -> int:
        """Push ``message`` to each open socket of ``user_id``.

        Returns how many sockets took it. A socket whose send raises is
        dropped from the registry.
        """
        sockets = self._sockets_by_user.get(user_id)
        if not sockets:
            return 0

        text = json.dumps(message, default=str)
        delivered = 0
        dead: list[str] = []
        for conn_id, client in list(sockets.items()):
            try:
                await client.websocket.send_text(text)
            except Exception:
                logger.debug("ws_send_failed", conn_id=conn_id, user_id=user_id)
                dead.append(conn_id)
                continue
            client.messages_sent += 1
            delivered += 1

        for conn_id in dead:
            await self.disconnect(conn_id)
        return delivered

    def get_stats(self) -> dict:
        return {
            "total_connections": self.connection_count,
            "unique_users": len(self._sockets_by_user),
        }


manager = ConnectionManager()
