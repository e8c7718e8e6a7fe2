"""Profile and social platform API endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.auth.context import Identity, RequestContext
from collabex.auth.dependencies import get_identity, get_profile_context
from collabex.database import get_session
from collabex.db.models import Profile, SocialPlatform
from collabex.profiles.schemas import (
    AddPlatformRequest,
    CreateProfileRequest,
    PaymentPreferencesRequest,
    PlatformListResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    PublicProfileResponse,
    SocialPlatformResponse,
    UpdatePlatformRequest,
)
from collabex.profiles.service import (
    add_platform,
    create_profile,
    delete_platform,
    get_profile,
    list_platforms,
    set_niches,
    update_payment_preferences,
    update_platform,
    update_profile,
)

router = APIRouter(prefix="/api/v1/profiles", tags=["Profiles"])


def _niches(profile: Profile) -> list[str]:
    return sorted(n.niche for n in profile.niches)


def _platform_response(p: SocialPlatform) -> SocialPlatformResponse:
    return SocialPlatformResponse(
        id=str(p.id),
        platform_name=p.platform_name,
        handle=p.handle,
        url=p.url,
        follower_count=p.follower_count,
        is_verified=p.is_verified,
        verified_at=p.verified_at,
    )


def _profile_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        id=str(profile.id),
        user_id=str(profile.user_id),
        display_name=profile.display_name,
        bio=profile.bio,
        location=profile.location,
        avatar_url=profile.avatar_url,
        banner_url=profile.banner_url,
        account_type=profile.account_type,
        audience_tier=profile.audience_tier,
        onboarding_completed=profile.onboarding_completed,
        payment_preferences=profile.payment_preferences or {},
        niches=_niches(profile),
        created_at=profile.created_at,
    )


@router.post("", response_model=ProfileResponse, status_code=201)
async def create_my_profile(
    body: CreateProfileRequest,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_session),
):
    """Create the caller's profile (signup)."""
    profile = await create_profile(db, identity, body.account_type, body.display_name)
    await db.commit()
    return _profile_response(profile)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(ctx: RequestContext = Depends(get_profile_context)):
    """Get the caller's own profile."""
    return _profile_response(ctx.require_profile())


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    body: ProfileUpdateRequest,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Update settings/onboarding fields and, if given, replace niches."""
    profile = await update_profile(
        db,
        ctx.require_profile(),
        display_name=body.display_name,
        bio=body.bio,
        location=body.location,
        avatar_url=body.avatar_url,
        banner_url=body.banner_url,
        account_type=body.account_type,
        audience_tier=body.audience_tier,
        onboarding_completed=body.onboarding_completed,
    )
    if body.niches is not None:
        await set_niches(db, profile, body.niches)
    await db.commit()
    return _profile_response(profile)


@router.put("/me/payment", response_model=ProfileResponse)
async def update_my_payment_preferences(
    body: PaymentPreferencesRequest,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Merge payment preferences (rates, currency, free-collab flag)."""
    profile = await update_payment_preferences(db, ctx.require_profile(), body.model_dump(exclude_none=True))
    await db.commit()
    return _profile_response(profile)


@router.get("/me/platforms", response_model=PlatformListResponse)
async def get_my_platforms(
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    platforms = await list_platforms(db, ctx.profile_id)
    return PlatformListResponse(platforms=[_platform_response(p) for p in platforms])


@router.post("/me/platforms", response_model=SocialPlatformResponse, status_code=201)
async def add_my_platform(
    body: AddPlatformRequest,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Claim a social account. Verify it with the verify-social-platform function."""
    platform = await add_platform(
        db, ctx.require_profile(), body.platform_name, body.handle, body.url, body.follower_count,
    )
    await db.commit()
    return _platform_response(platform)


@router.patch("/me/platforms/{platform_id}", response_model=SocialPlatformResponse)
async def update_my_platform(
    platform_id: uuid.UUID,
    body: UpdatePlatformRequest,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    platform = await update_platform(
        db, ctx.require_profile(), platform_id, body.handle, body.url, body.follower_count,
    )
    await db.commit()
    return _platform_response(platform)


@router.delete("/me/platforms/{platform_id}", status_code=200)
async def delete_my_platform(
    platform_id: uuid.UUID,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    await delete_platform(db, ctx.require_profile(), platform_id)
    await db.commit()
    return {"detail": "Platform removed"}


@router.get("/{profile_id}", response_model=PublicProfileResponse)
async def get_public_profile(
    profile_id: uuid.UUID,
    _identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_session),
):
    """Public view of another profile."""
    profile = await get_profile(db, profile_id)
    platforms = await list_platforms(db, profile.id)
    return PublicProfileResponse(
        id=str(profile.id),
        display_name=profile.display_name,
        bio=profile.bio,
        location=profile.location,
        avatar_url=profile.avatar_url,
        banner_url=profile.banner_url,
        account_type=profile.account_type,
        audience_tier=profile.audience_tier,
        niches=_niches(profile),
        platforms=[_platform_response(p) for p in platforms],
    )
