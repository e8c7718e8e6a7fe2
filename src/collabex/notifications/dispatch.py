"""Notification dispatch: authenticate -> resolve -> gate -> persist -> email.

Two entry points share the same tail:
- ``send_notification`` serves the HTTP function and runs inline.
- ``queue_notification`` is used by collaboration and application flows; it
  only enqueues, and the outbox worker later runs ``handle_notification_event``.

The email is always an outbox event, so a provider outage never fails the
request that created the in-app row.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.auth.context import Identity
from collabex.auth.dependencies import get_profile_by_user_id
from collabex.db.models import Notification, Profile
from collabex.email.service import get_email_service
from collabex.errors import Forbidden, NotFound, ValidationFailed
from collabex.notifications.gate import can_notify
from collabex.notifications.outbox import OutboxHandler, enqueue_event
from collabex.notifications.payloads import NotificationPayload, dump_payload, parse_payload
from collabex.notifications.schemas import NotificationRequest
from collabex.notifications.service import create_notification

logger = structlog.get_logger()


def sender_display_name(profile: Profile) -> str:
    return (profile.display_name or "A user")[:100]


async def _persist_and_queue_email(
    db: AsyncSession,
    recipient: Profile,
    type_: str,
    title: str,
    message: str,
    sender_name: str,
    payload: NotificationPayload | None,
) -> Notification:
    data = dump_payload(payload)
    notification = await create_notification(db, recipient.user_id, type_, title, message, data)

    if recipient.email:
        await enqueue_event(db, "email", {
            "to": recipient.email,
            "type": type_,
            "sender_name": sender_name,
            "message": message,
            "data": data,
        })
    else:
        logger.warning("notification_email_skipped", recipient_profile_id=str(recipient.id), reason="no_email")

    return notification


async def send_notification(db: AsyncSession, identity: Identity, request: NotificationRequest) -> Notification:
    """
    Dispatch a notification on behalf of the caller. Caller commits.

    Raises:
        Forbidden: Sender has no profile, or no relationship with the recipient.
        NotFound: Recipient profile does not exist.
    """
    sender = await get_profile_by_user_id(db, identity.user_id)
    if sender is None:
        raise Forbidden("Sender profile not found")

    recipient = await get_profile_by_user_id(db, uuid.UUID(request.recipient_user_id))
    if recipient is None:
        raise NotFound("Recipient not found")

    if not await can_notify(db, sender.id, recipient.id, request.type):
        logger.warning(
            "notification_gate_denied",
            sender_profile_id=str(sender.id),
            recipient_profile_id=str(recipient.id),
            type=request.type,
        )
        raise Forbidden("Unauthorized - no relationship with recipient")

    notification = await _persist_and_queue_email(
        db, recipient, request.type, request.title, request.message, request.sender_name, request.payload,
    )
    logger.info(
        "notification_created",
        notification_id=str(notification.id),
        recipient_user_id=str(recipient.user_id),
        type=request.type,
    )
    return notification


async def queue_notification(
    db: AsyncSession,
    sender: Profile,
    recipient: Profile,
    type_: str,
    title: str,
    message: str,
    payload: NotificationPayload | None = None,
) -> None:
    """Enqueue a notification from ``sender`` to ``recipient`` for the outbox worker."""
    await enqueue_event(db, "notification", {
        "sender_profile_id": str(sender.id),
        "recipient_profile_id": str(recipient.id),
        "type": type_,
        "title": title,
        "message": message,
        "sender_name": sender_display_name(sender),
        "data": dump_payload(payload),
    })


def _parse_event_payload(type_: str, data: dict[str, Any] | None) -> NotificationPayload | None:
    try:
        return parse_payload(type_, data or None)
    except (KeyError, ValidationError) as e:
        raise ValidationFailed(f"Invalid queued payload for {type_}") from e


async def handle_notification_event(db: AsyncSession, payload: dict[str, Any]) -> Notification:
    """Outbox handler: run the gate and persist a queued notification."""
    sender = await db.get(Profile, uuid.UUID(payload["sender_profile_id"]))
    if sender is None:
        raise Forbidden("Sender profile not found")
    recipient = await db.get(Profile, uuid.UUID(payload["recipient_profile_id"]))
    if recipient is None:
        raise NotFound("Recipient not found")

    type_ = payload["type"]
    typed = _parse_event_payload(type_, payload.get("data"))
    if not await can_notify(db, sender.id, recipient.id, type_):
        raise Forbidden("Unauthorized - no relationship with recipient")

    return await _persist_and_queue_email(
        db, recipient, type_, payload["title"], payload["message"], payload["sender_name"], typed,
    )


async def handle_email_event(_db: AsyncSession, payload: dict[str, Any]) -> None:
    """Outbox handler: render and send the notification email.

    A provider returning False raises so the outbox retries with backoff.
    """
    to = payload.get("to")
    if not to:
        raise ValidationFailed("Email event has no recipient address")

    type_ = payload["type"]
    typed = _parse_event_payload(type_, payload.get("data"))
    sent = await get_email_service().send_notification_email(
        to, type_, payload["sender_name"], payload["message"], typed,
    )
    if not sent:
        msg = f"Email provider rejected {type_} email"
        raise RuntimeError(msg)


OUTBOX_HANDLERS: dict[str, OutboxHandler] = {
    "notification": handle_notification_event,
    "email": handle_email_event,
}
