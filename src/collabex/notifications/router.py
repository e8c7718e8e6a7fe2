"""Notification API endpoints: inbox routes plus the send-notification function."""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Security
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.auth.context import Identity
from collabex.auth.dependencies import authenticate, bearer_scheme, get_identity
from collabex.config import get_settings
from collabex.database import get_session
from collabex.db.models import Notification
from collabex.errors import CollabExError
from collabex.functions import GENERIC_ERROR, error_response, first_validation_message, read_json_body
from collabex.notifications.dispatch import send_notification
from collabex.notifications.schemas import (
    FIELD_MESSAGES,
    NotificationListResponse,
    NotificationRequest,
    NotificationResponse,
    SendNotificationResponse,
    UnreadCountResponse,
)
from collabex.notifications.service import (
    delete_notification,
    get_notifications,
    get_unread_count,
    mark_all_as_read,
    mark_as_read,
    publish_notification,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["Notifications"])
functions_router = APIRouter(prefix="/api/v1/functions", tags=["Functions"])


def _to_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=str(n.id),
        type=n.type,
        title=n.title,
        message=n.message,
        data=n.data or {},
        read=n.read,
        created_at=n.created_at,
    )


@router.get("/notifications", response_model=NotificationListResponse)
async def list_notifications(
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_session),
):
    """The caller's most recent notifications, newest first."""
    limit = get_settings().notification_list_limit
    notifications = await get_notifications(db, identity.user_id, limit)
    unread = await get_unread_count(db, identity.user_id)
    return NotificationListResponse(
        notifications=[_to_response(n) for n in notifications],
        unread_count=unread,
    )


@router.get("/notifications/unread-count", response_model=UnreadCountResponse)
async def get_unread_notification_count(
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_session),
):
    """Get unread notification count."""
    count = await get_unread_count(db, identity.user_id)
    return UnreadCountResponse(unread_count=count)


@router.post("/notifications/read-all", status_code=200)
async def mark_all_read(
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_session),
):
    """Mark all notifications as read."""
    count = await mark_all_as_read(db, identity.user_id)
    await db.commit()
    return {"detail": f"Marked {count} notifications as read"}


@router.post("/notifications/{notification_id}/read", status_code=200)
async def mark_notification_read(
    notification_id: uuid.UUID,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_session),
):
    """Mark a notification as read."""
    found = await mark_as_read(db, identity.user_id, notification_id)
    if not found:
        raise HTTPException(status_code=404, detail="Notification not found")
    await db.commit()
    return {"detail": "Notification marked as read"}


@router.delete("/notifications/{notification_id}", status_code=200)
async def remove_notification(
    notification_id: uuid.UUID,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_session),
):
    """Delete one of the caller's notifications."""
    found = await delete_notification(db, identity.user_id, notification_id)
    if not found:
        raise HTTPException(status_code=404, detail="Notification not found")
    await db.commit()
    return {"detail": "Notification deleted"}


@functions_router.post("/send-notification", response_model=SendNotificationResponse)
async def send_notification_function(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
    db: AsyncSession = Depends(get_session),
):
    """Authenticated, relationship-gated notification dispatch.

    Failures return ``{"error": ...}`` with a fixed message; internal detail is
    only logged.
    """
    try:
        identity = authenticate(credentials)
    except CollabExError as e:
        return error_response(e.status_code, {"error": e.message})

    try:
        body = NotificationRequest.model_validate(await read_json_body(request))
    except CollabExError as e:
        return error_response(e.status_code, {"error": e.message})
    except ValidationError as e:
        return error_response(400, {"error": first_validation_message(e, FIELD_MESSAGES, "data")})

    try:
        notification = await send_notification(db, identity, body)
        await db.commit()
    except CollabExError as e:
        await db.rollback()
        return error_response(e.status_code, {"error": e.message})
    except Exception:
        await db.rollback()
        logger.exception("send_notification_failed", sender_user_id=str(identity.user_id))
        return error_response(500, {"error": GENERIC_ERROR})

    await publish_notification(notification)
    return JSONResponse({"success": True, "message": "Notification sent"})
