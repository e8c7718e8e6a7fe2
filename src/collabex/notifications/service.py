"""Notification creation and inbox service.

Notifications are:
1. Persisted in the database (title and message HTML-escaped)
2. Pushed to the recipient's live connections via Redis pub/sub after commit
3. Read, marked read, or deleted by the recipient only
"""

from __future__ import annotations

import logging
import uuid
from html import escape
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.db.models import Notification
from collabex.notifications.payloads import NOTIFICATION_TYPES
from collabex.redis_client import publish_user_event

logger = logging.getLogger(__name__)


async def create_notification(
    db: AsyncSession,
    user_id: uuid.UUID,
    type_: str,
    title: str,
    message: str,
    data: dict[str, Any] | None = None,
) -> Notification:
    """Insert an inbox row for ``user_id``. Caller commits."""
    if type_ not in NOTIFICATION_TYPES:
        raise ValueError(f"Invalid notification type: {type_}. Must be one of {NOTIFICATION_TYPES}")

    notification = Notification(
        user_id=user_id,
        type=type_,
        title=escape(title),
        message=escape(message),
        data=data or {},
        read=False,
    )
    db.add(notification)
    await db.flush()
    return notification


async def publish_notification(notification: Notification) -> None:
    """Fan a committed notification out to the recipient's open sockets."""
    await publish_user_event(
        str(notification.user_id),
        "notification",
        {
            "id": str(notification.id),
            "type": notification.type,
            "title": notification.title,
            "message": notification.message,
            "data": notification.data,
            "read": notification.read,
            "created_at": notification.created_at.isoformat() if notification.created_at else None,
        },
    )


async def get_notifications(db: AsyncSession, user_id: uuid.UUID, limit: int = 20) -> list[Notification]:
    """Most recent notifications first, capped at ``limit``."""
    result = await db.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_unread_count(db: AsyncSession, user_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
    )
    return result.scalar_one()


async def mark_as_read(db: AsyncSession, user_id: uuid.UUID, notification_id: uuid.UUID) -> bool:
    """Mark a single notification as read. Returns True if found."""
    result = await db.execute(
        update(Notification)
        .where(Notification.id == notification_id, Notification.user_id == user_id)
        .values(read=True)
    )
    await db.flush()
    return result.rowcount > 0


async def mark_all_as_read(db: AsyncSession, user_id: uuid.UUID) -> int:
    """Mark all unread notifications as read. Returns count updated."""
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
        .values(read=True)
    )
    await db.flush()
    return result.rowcount


async def delete_notification(db: AsyncSession, user_id: uuid.UUID, notification_id: uuid.UUID) -> bool:
    """Delete one of the caller's notifications. Returns True if found."""
    result = await db.execute(
        delete(Notification).where(Notification.id == notification_id, Notification.user_id == user_id)
    )
    await db.flush()
    return result.rowcount > 0
