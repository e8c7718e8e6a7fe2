"""Pydantic schemas for the verify-social-platform function."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from collabex.notifications.schemas import UUID_PATTERN

FIELD_MESSAGES = {
    "platformId": "Invalid platformId - must be a valid UUID",
    "platformName": "Invalid platformName - must be 1-50 characters",
    "handle": "Invalid handle - must be max 100 characters",
    "url": "Invalid url - must be max 500 characters and start with http:// or https://",
}


class VerifyPlatformRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    platform_id: str = Field(..., alias="platformId", pattern=UUID_PATTERN)
    platform_name: str = Field(..., alias="platformName", min_length=1, max_length=50)
    handle: str = Field("", max_length=100)
    url: str = Field("", max_length=500, pattern=r"^(https?://.*)?$")

    @field_validator("handle", "url", mode="before")
    @classmethod
    def _none_as_empty(cls, v: object) -> object:
        return "" if v is None else v


class VerifyPlatformResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    verified: bool
    display_name: str | None = Field(None, serialization_alias="displayName")
    error: str | None = None
