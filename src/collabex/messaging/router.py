"""Messaging API endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.auth.context import RequestContext
from collabex.auth.dependencies import get_profile_context
from collabex.database import get_session
from collabex.db.models import Message
from collabex.messaging.schemas import ConversationResponse, MessageResponse, SendMessageRequest
from collabex.messaging.service import get_conversation, mark_conversation_read, publish_message, send_message

router = APIRouter(prefix="/api/v1/messages", tags=["Messages"])


def _message_response(m: Message) -> MessageResponse:
    return MessageResponse(
        id=str(m.id),
        sender_id=str(m.sender_id),
        receiver_id=str(m.receiver_id),
        content=m.content,
        read=m.read,
        created_at=m.created_at,
    )


@router.get("/{partner_id}", response_model=ConversationResponse)
async def get_messages(
    partner_id: uuid.UUID,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Conversation with a partner, oldest first."""
    messages = await get_conversation(db, ctx.profile_id, partner_id)
    return ConversationResponse(partner_id=str(partner_id), messages=[_message_response(m) for m in messages])


@router.post("/{partner_id}", response_model=MessageResponse, status_code=201)
async def post_message(
    partner_id: uuid.UUID,
    body: SendMessageRequest,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Send a message to a matched partner."""
    message = await send_message(db, ctx.require_profile(), partner_id, body.content)
    await db.commit()
    await publish_message(db, message)
    return _message_response(message)


@router.post("/{partner_id}/read", status_code=200)
async def read_messages(
    partner_id: uuid.UUID,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Mark messages from a partner as read."""
    count = await mark_conversation_read(db, ctx.profile_id, partner_id)
    await db.commit()
    return {"detail": f"Marked {count} messages as read"}
