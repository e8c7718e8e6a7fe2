"""Pydantic schemas for matching endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class CandidateResponse(BaseModel):
    id: str
    display_name: str
    bio: str | None = None
    location: str | None = None
    avatar_url: str | None = None
    account_type: str
    audience_tier: str | None = None
    niches: list[str] = []


class CandidateListResponse(BaseModel):
    candidates: list[CandidateResponse]


class SwipeRequest(BaseModel):
    profile_id: uuid.UUID
    direction: Literal["left", "right"]


class SwipeResponse(BaseModel):
    matched: bool
    match_id: str | None = None


class MatchResponse(BaseModel):
    id: str
    partner: CandidateResponse | None = None
    created_at: datetime


class MatchListResponse(BaseModel):
    matches: list[MatchResponse]
