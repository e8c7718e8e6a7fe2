"""Direct messages between matched profiles."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.db.models import Message, Profile
from collabex.errors import Forbidden, NotFound, ValidationFailed
from collabex.notifications.gate import has_match
from collabex.redis_client import publish_user_event

logger = structlog.get_logger()

MAX_MESSAGE_LENGTH = 5000


async def send_message(db: AsyncSession, sender: Profile, receiver_id: uuid.UUID, content: str) -> Message:
    """
    Store a message to a matched partner. Caller commits, then calls ``publish_message``.

    Raises:
        ValidationFailed: Empty or oversized content.
        NotFound: Receiver profile does not exist.
        Forbidden: Sender and receiver are not matched.
    """
    content = content.strip()
    if not content or len(content) > MAX_MESSAGE_LENGTH:
        raise ValidationFailed(f"Message must be 1-{MAX_MESSAGE_LENGTH} characters")
    if await db.get(Profile, receiver_id) is None:
        raise NotFound("Recipient not found")
    if not await has_match(db, sender.id, receiver_id):
        raise Forbidden("You can only message your matches")

    message = Message(sender_id=sender.id, receiver_id=receiver_id, content=content, read=False)
    db.add(message)
    await db.flush()
    return message


async def publish_message(db: AsyncSession, message: Message) -> None:
    """Push a committed message to the receiver's live connections."""
    receiver = await db.get(Profile, message.receiver_id)
    if receiver is None:
        return
    await publish_user_event(
        str(receiver.user_id),
        "message",
        {
            "id": str(message.id),
            "sender_id": str(message.sender_id),
            "receiver_id": str(message.receiver_id),
            "content": message.content,
            "created_at": message.created_at.isoformat() if message.created_at else None,
        },
    )


async def get_conversation(db: AsyncSession, me: uuid.UUID, partner: uuid.UUID) -> list[Message]:
    """Both directions of a conversation, oldest first."""
    result = await db.execute(
        select(Message)
        .where(
            or_(
                and_(Message.sender_id == me, Message.receiver_id == partner),
                and_(Message.sender_id == partner, Message.receiver_id == me),
            )
        )
        .order_by(Message.created_at.asc())
    )
    return list(result.scalars().all())


async def mark_conversation_read(db: AsyncSession, me: uuid.UUID, partner: uuid.UUID) -> int:
    """Mark messages received from ``partner`` as read. Returns count updated."""
    result = await db.execute(
        update(Message)
        .where(Message.sender_id == partner, Message.receiver_id == me, Message.read.is_(False))
        .values(read=True)
    )
    await db.flush()
    return result.rowcount
