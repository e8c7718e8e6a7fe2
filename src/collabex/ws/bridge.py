"""Bridges Redis pub/sub to WebSocket clients.

Listens on the per-user channels (``ws:user:{user_id}``) that services publish
to after commit, and forwards each event to that user's open sockets.
Delivery is at-most-once: nothing is buffered for offline users.
"""

import asyncio
import json

import redis.asyncio as aioredis
import structlog

from collabex.ws.manager import ConnectionManager, manager

logger = structlog.get_logger()

USER_CHANNEL_PATTERN = "ws:user:*"


async def dispatch_user_message(conn_manager: ConnectionManager, redis_channel: str, data: str | bytes) -> int:
    """Forward one pub/sub payload to the user named in ``redis_channel``.

    Returns the number of sockets reached; malformed payloads reach none.
    """
    try:
        if isinstance(data, bytes):
            data = data.decode()
        payload = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("pubsub_invalid_message", channel=redis_channel)
        return 0
    if not isinstance(payload, dict):
        logger.warning("pubsub_invalid_message", channel=redis_channel)
        return 0

    user_id = redis_channel.split(":")[-1]
    event_type = payload.get("event", "notification")
    event_data = payload.get("data", payload)

    sent = await conn_manager.send_to_user_direct(user_id, {
        "type": event_type,
        "payload": event_data,
    })
    if sent > 0:
        logger.debug("user_event_sent", user_id=user_id, event_name=event_type, recipients=sent)
    return sent


class PubSubBridge:
    """Subscribes to Redis pub/sub and pushes messages to WebSocket clients."""

    def __init__(self, redis_client: aioredis.Redis, conn_manager: ConnectionManager = manager) -> None:
        self.redis = redis_client
        self.manager = conn_manager
        self._running = False

    async def start(self) -> None:
        """Start listening to the per-user channels."""
        self._running = True
        pubsub = self.redis.pubsub()
        await pubsub.psubscribe(USER_CHANNEL_PATTERN)
        logger.info("pubsub_bridge_started", patterns=[USER_CHANNEL_PATTERN])

        try:
            while self._running:
                message = await pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=1.0,
                )
                if message is None or message.get("type") != "pmessage":
                    continue

                redis_channel = message.get("channel", "")
                if isinstance(redis_channel, bytes):
                    redis_channel = redis_channel.decode()
                await dispatch_user_message(self.manager, redis_channel, message.get("data", b""))

        except asyncio.CancelledError:
            pass
        finally:
            await pubsub.punsubscribe()
            await pubsub.aclose()
            logger.info("pubsub_bridge_stopped")

    async def stop(self) -> None:
        """Signal the bridge to stop."""
        self._running = False
