"""Pydantic schemas for notification endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from collabex.notifications.payloads import NotificationPayload, NotificationType, parse_payload

UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"

FIELD_MESSAGES = {
    "recipientUserId": "Invalid recipientUserId - must be a valid UUID",
    "type": "Invalid type - must be collab_request, collab_accepted, collab_completed, or collab_interest",
    "title": "Invalid title - must be 1-200 characters",
    "message": "Invalid message - must be 1-1000 characters",
    "senderName": "Invalid senderName - must be 1-100 characters",
    "data": "Invalid data - must be an object matching the notification type",
}


# --- Send notification function ---


class NotificationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recipient_user_id: str = Field(..., alias="recipientUserId", pattern=UUID_PATTERN)
    type: NotificationType
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=1000)
    sender_name: str = Field(..., alias="senderName", min_length=1, max_length=100)
    data: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _check_payload(self) -> NotificationRequest:
        try:
            parse_payload(self.type, self.data)
        except ValidationError as e:
            msg = f"data does not match the {self.type} payload"
            raise ValueError(msg) from e
        return self

    @property
    def payload(self) -> NotificationPayload | None:
        return parse_payload(self.type, self.data)


class SendNotificationResponse(BaseModel):
    success: bool
    message: str


# --- Inbox ---


class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    message: str
    data: dict[str, Any] = {}
    read: bool
    created_at: datetime


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int
