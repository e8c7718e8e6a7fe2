"""Typed ``data`` payloads, one variant per notification type.

The wire format keeps ``type`` beside ``data``, so the variant is selected by
looking ``type`` up in PAYLOAD_MODELS rather than by a tag inside the payload.
Unknown keys are rejected so a template never renders against a field the
sender did not mean to send.
"""

from __future__ import annotations

import uuid
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

NotificationType = Literal["collab_request", "collab_accepted", "collab_completed", "collab_interest"]

NOTIFICATION_TYPES: tuple[str, ...] = ("collab_request", "collab_accepted", "collab_completed", "collab_interest")


class _Payload(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class CollabRequestData(_Payload):
    collaboration_id: uuid.UUID | None = Field(None, alias="collaborationId")
    collaboration_title: str | None = Field(None, alias="collaborationTitle", max_length=200)


class CollabAcceptedData(_Payload):
    collaboration_id: uuid.UUID | None = Field(None, alias="collaborationId")


class CollabCompletedData(_Payload):
    collaboration_id: uuid.UUID | None = Field(None, alias="collaborationId")


class CollabInterestData(_Payload):
    post_id: uuid.UUID = Field(..., alias="postId")
    post_title: str = Field(..., alias="postTitle", min_length=1, max_length=200)


NotificationPayload = CollabRequestData | CollabAcceptedData | CollabCompletedData | CollabInterestData

PAYLOAD_MODELS: dict[str, type[_Payload]] = {
    "collab_request": CollabRequestData,
    "collab_accepted": CollabAcceptedData,
    "collab_completed": CollabCompletedData,
    "collab_interest": CollabInterestData,
}


def parse_payload(type_: str, data: dict[str, Any] | None) -> NotificationPayload | None:
    """
    Validate ``data`` against the variant for ``type_``.

    Raises:
        KeyError: If ``type_`` is not a notification type.
        pydantic.ValidationError: If ``data`` does not fit the variant.
    """
    model = PAYLOAD_MODELS[type_]
    if data is None:
        return None
    return model.model_validate(data)  # type: ignore[return-value]


def dump_payload(payload: NotificationPayload | None) -> dict[str, Any]:
    """Serialize a payload to the camelCase JSON stored on the notification row."""
    if payload is None:
        return {}
    return payload.model_dump(mode="json", by_alias=True, exclude_none=True)
