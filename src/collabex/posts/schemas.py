"""Pydantic schemas for collab post endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field


class CreatePostRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    requirements: str | None = Field(None, max_length=2000)
    niche: str | None = Field(None, max_length=64)
    platforms: list[str] = Field(default_factory=list, max_length=10)
    deadline: date | None = None


class UpdatePostStatusRequest(BaseModel):
    status: Literal["open", "in_progress", "closed"]


class PostResponse(BaseModel):
    id: str
    author_id: str
    author_name: str | None = None
    title: str
    description: str
    requirements: str | None = None
    niche: str | None = None
    platforms: list[str] = []
    deadline: date | None = None
    status: str
    created_at: datetime


class PostListResponse(BaseModel):
    posts: list[PostResponse]


class ApplyRequest(BaseModel):
    message: str | None = Field(None, max_length=1000)


class ApplicationResponse(BaseModel):
    id: str
    post_id: str
    applicant_id: str
    applicant_name: str | None = None
    message: str | None = None
    status: str
    created_at: datetime


class ApplicationListResponse(BaseModel):
    applications: list[ApplicationResponse]
