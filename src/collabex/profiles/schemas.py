"""Request/response schemas for profile and social platform endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class CreateProfileRequest(BaseModel):
    account_type: Literal["influencer", "brand"] = "influencer"
    display_name: str = Field("", max_length=100)


class ProfileUpdateRequest(BaseModel):
    """Settings/onboarding update; omitted fields are left unchanged."""

    display_name: str | None = Field(None, min_length=1, max_length=100)
    bio: str | None = Field(None, max_length=1000)
    location: str | None = Field(None, max_length=100)
    avatar_url: str | None = Field(None, max_length=1024)
    banner_url: str | None = Field(None, max_length=1024)
    account_type: Literal["influencer", "brand"] | None = None
    audience_tier: Literal["nano", "micro", "mid", "macro", "mega"] | None = None
    onboarding_completed: bool | None = None
    niches: list[str] | None = Field(None, max_length=18)


class PaymentPreferencesRequest(BaseModel):
    base_rate: float | None = Field(None, ge=0)
    rate_type: Literal[
        "per_post", "per_story", "per_reel", "per_video", "per_hour", "per_project", "per_campaign",
    ] | None = None
    currency: str | None = Field(None, min_length=3, max_length=3)
    open_to_free_collabs: bool | None = None


class SocialPlatformResponse(BaseModel):
    id: str
    platform_name: str
    handle: str
    url: str | None = None
    follower_count: int | None = None
    is_verified: bool
    verified_at: datetime | None = None


class ProfileResponse(BaseModel):
    """Own profile, including private settings."""

    id: str
    user_id: str
    display_name: str
    bio: str | None = None
    location: str | None = None
    avatar_url: str | None = None
    banner_url: str | None = None
    account_type: str
    audience_tier: str | None = None
    onboarding_completed: bool
    payment_preferences: dict[str, Any] = {}
    niches: list[str] = []
    created_at: datetime


class PublicProfileResponse(BaseModel):
    """Profile as seen by other users."""

    id: str
    display_name: str
    bio: str | None = None
    location: str | None = None
    avatar_url: str | None = None
    banner_url: str | None = None
    account_type: str
    audience_tier: str | None = None
    niches: list[str] = []
    platforms: list[SocialPlatformResponse] = []


class AddPlatformRequest(BaseModel):
    platform_name: str = Field(..., min_length=1, max_length=50)
    handle: str = Field(..., min_length=1, max_length=100)
    url: str | None = Field(None, max_length=500, pattern=r"^https?://")
    follower_count: int | None = Field(None, ge=0)


class UpdatePlatformRequest(BaseModel):
    handle: str | None = Field(None, min_length=1, max_length=100)
    url: str | None = Field(None, max_length=500, pattern=r"^(https?://.*)?$")
    follower_count: int | None = Field(None, ge=0)


class PlatformListResponse(BaseModel):
    platforms: list[SocialPlatformResponse]
