"""Redis connection pool and per-user event publishing."""

import json
from typing import Any

import redis.asyncio as redis
import structlog

logger = structlog.get_logger()

_pool: redis.Redis | None = None


async def init_redis(url: str) -> None:
    """Initialize the Redis connection pool."""
    global _pool  # noqa: PLW0603
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
    )


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _pool  # noqa: PLW0603
    if _pool:
        await _pool.aclose()
        _pool = None


def get_redis() -> redis.Redis:
    """Get the Redis client."""
    if _pool is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _pool


def user_channel(user_id: str) -> str:
    """Pub/sub channel carrying real-time events for one identity."""
    return f"ws:user:{user_id}"


async def publish_user_event(user_id: str, event: str, data: dict[str, Any]) -> None:
    """Push an event to a user's live connections.

    Delivery is at-most-once: a missing pool or a publish error is logged and dropped.
    """
    if _pool is None:
        return
    try:
        await _pool.publish(user_channel(user_id), json.dumps({"event": event, "data": data}, default=str))
    except Exception:
        logger.warning("user_event_publish_failed", user_id=user_id, event_name=event, exc_info=True)
