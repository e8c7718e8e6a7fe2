"""Profile, niche, and social platform business logic."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select

from collabex.auth.dependencies import get_profile_by_user_id
from collabex.db.models import Profile, ProfileNiche, SocialPlatform
from collabex.errors import Conflict, Forbidden, NotFound, ValidationFailed

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from collabex.auth.context import Identity

logger = structlog.get_logger()

ACCOUNT_TYPES = ("influencer", "brand")
AUDIENCE_TIERS = ("nano", "micro", "mid", "macro", "mega")
NICHES = (
    "Fashion", "Tech", "Fitness", "Food", "Travel", "Gaming",
    "Beauty", "Music", "Education", "Lifestyle", "Comedy",
    "Photography", "Art", "Health", "Finance", "Sports",
    "Parenting", "DIY",
)


async def create_profile(
    db: AsyncSession,
    identity: Identity,
    account_type: str = "influencer",
    display_name: str = "",
) -> Profile:
    """
    Create the caller's profile at signup.

    Raises:
        ValidationFailed: Unknown account type.
        Conflict: The identity already has a profile.
    """
    if account_type not in ACCOUNT_TYPES:
        raise ValidationFailed(f"Invalid account type: {account_type}. Must be one of {ACCOUNT_TYPES}")
    if await get_profile_by_user_id(db, identity.user_id) is not None:
        raise Conflict("Profile already exists")

    profile = Profile(
        user_id=identity.user_id,
        email=identity.email,
        display_name=display_name.strip(),
        account_type=account_type,
        onboarding_completed=False,
        payment_preferences={},
        niches=[],
    )
    db.add(profile)
    await db.flush()
    logger.info("profile_created", profile_id=str(profile.id), account_type=account_type)
    return profile


async def get_profile(db: AsyncSession, profile_id: uuid.UUID) -> Profile:
    profile = await db.get(Profile, profile_id)
    if profile is None:
        raise NotFound("Profile not found")
    return profile


async def profiles_by_id(db: AsyncSession, ids: set[uuid.UUID]) -> dict[uuid.UUID, Profile]:
    """Batch-load profiles keyed by id; missing ids are simply absent."""
    if not ids:
        return {}
    result = await db.execute(select(Profile).where(Profile.id.in_(ids)))
    return {p.id: p for p in result.scalars().all()}


async def update_profile(
    db: AsyncSession,
    profile: Profile,
    display_name: str | None = None,
    bio: str | None = None,
    location: str | None = None,
    avatar_url: str | None = None,
    banner_url: str | None = None,
    account_type: str | None = None,
    audience_tier: str | None = None,
    onboarding_completed: bool | None = None,
) -> Profile:
    """
    Update settings/onboarding fields. ``None`` leaves a field unchanged.

    Raises:
        ValidationFailed: Unknown account type or audience tier.
    """
    if account_type is not None:
        if account_type not in ACCOUNT_TYPES:
            raise ValidationFailed(f"Invalid account type: {account_type}. Must be one of {ACCOUNT_TYPES}")
        profile.account_type = account_type
    if audience_tier is not None:
        if audience_tier not in AUDIENCE_TIERS:
            raise ValidationFailed(f"Invalid audience tier: {audience_tier}. Must be one of {AUDIENCE_TIERS}")
        profile.audience_tier = audience_tier

    if display_name is not None:
        profile.display_name = display_name.strip()
    if bio is not None:
        profile.bio = bio
    if location is not None:
        profile.location = location
    if avatar_url is not None:
        profile.avatar_url = avatar_url
    if banner_url is not None:
        profile.banner_url = banner_url
    if onboarding_completed is not None:
        profile.onboarding_completed = onboarding_completed

    await db.flush()
    return profile


async def set_niches(db: AsyncSession, profile: Profile, niches: list[str]) -> Profile:
    """Replace the profile's niches with ``niches`` (order-insensitive, deduplicated)."""
    unknown = [n for n in niches if n not in NICHES]
    if unknown:
        raise ValidationFailed(f"Unknown niches: {unknown}")

    wanted = set(niches)
    kept = [n for n in profile.niches if n.niche in wanted]
    have = {n.niche for n in kept}
    # Reuse surviving rows; delete-then-insert of the same niche would trip the unique constraint
    profile.niches = kept + [ProfileNiche(niche=n) for n in dict.fromkeys(niches) if n not in have]
    await db.flush()
    return profile


async def update_payment_preferences(db: AsyncSession, profile: Profile, preferences: dict[str, Any]) -> Profile:
    """Merge ``preferences`` into the stored payment preferences."""
    merged = dict(profile.payment_preferences or {})
    merged.update(preferences)
    profile.payment_preferences = merged
    await db.flush()
    return profile


# --- Social platforms ---


async def list_platforms(db: AsyncSession, profile_id: uuid.UUID) -> list[SocialPlatform]:
    result = await db.execute(
        select(SocialPlatform)
        .where(SocialPlatform.profile_id == profile_id)
        .order_by(SocialPlatform.created_at.asc())
    )
    return list(result.scalars().all())


async def add_platform(
    db: AsyncSession,
    profile: Profile,
    platform_name: str,
    handle: str,
    url: str | None = None,
    follower_count: int | None = None,
) -> SocialPlatform:
    """Claim an external account. New claims start unverified."""
    platform = SocialPlatform(
        profile_id=profile.id,
        platform_name=platform_name.strip(),
        handle=handle.strip(),
        url=url or None,
        follower_count=follower_count,
        is_verified=False,
    )
    db.add(platform)
    await db.flush()
    return platform


async def get_owned_platform(db: AsyncSession, profile: Profile, platform_id: uuid.UUID) -> SocialPlatform:
    platform = await db.get(SocialPlatform, platform_id)
    if platform is None:
        raise NotFound("Platform not found")
    if platform.profile_id != profile.id:
        raise Forbidden("Unauthorized - not your platform")
    return platform


async def update_platform(
    db: AsyncSession,
    profile: Profile,
    platform_id: uuid.UUID,
    handle: str | None = None,
    url: str | None = None,
    follower_count: int | None = None,
) -> SocialPlatform:
    """Edit a claimed account. Changing the handle or URL clears verification."""
    platform = await get_owned_platform(db, profile, platform_id)

    identity_changed = False
    if handle is not None and handle.strip() != platform.handle:
        platform.handle = handle.strip()
        identity_changed = True
    if url is not None and (url or None) != platform.url:
        platform.url = url or None
        identity_changed = True
    if follower_count is not None:
        platform.follower_count = follower_count

    if identity_changed:
        platform.is_verified = False
        platform.verified_at = None

    await db.flush()
    return platform


async def delete_platform(db: AsyncSession, profile: Profile, platform_id: uuid.UUID) -> None:
    platform = await get_owned_platform(db, profile, platform_id)
    await db.delete(platform)
    await db.flush()
