"""Pydantic schemas for collaboration and review endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class ProfileSummary(BaseModel):
    id: str
    display_name: str
    avatar_url: str | None = None


# --- Collaborations ---


class CreateCollaborationRequest(BaseModel):
    partner_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)


class UpdateCollaborationStatusRequest(BaseModel):
    status: Literal["in_progress", "completed", "cancelled"]


class CollaborationResponse(BaseModel):
    id: str
    title: str | None = None
    description: str | None = None
    status: str
    role: str
    partner: ProfileSummary | None = None
    actions: list[str] = []
    created_at: datetime
    completed_at: datetime | None = None


class CollaborationListResponse(BaseModel):
    collaborations: list[CollaborationResponse]


# --- Reviews ---


class SubmitReviewRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    content: str | None = Field(None, max_length=2000)


class ReviewResponse(BaseModel):
    id: str
    reviewer_id: str
    reviewee_id: str
    collaboration_id: str | None = None
    rating: int
    content: str | None = None
    created_at: datetime


class ReviewListResponse(BaseModel):
    reviews: list[ReviewResponse]
    average_rating: float | None = None
