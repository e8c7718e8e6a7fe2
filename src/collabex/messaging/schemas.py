"""Pydantic schemas for messaging endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SendMessageRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class MessageResponse(BaseModel):
    id: str
    sender_id: str
    receiver_id: str
    content: str
    read: bool
    created_at: datetime


class ConversationResponse(BaseModel):
    partner_id: str
    messages: list[MessageResponse]
