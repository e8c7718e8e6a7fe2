"""Swipe-based matching.

Swipes are append-only. A right swipe answered by a right swipe from the
other side creates one Match row for the unordered pair.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.db.models import Match, Profile, SwipeAction
from collabex.errors import Conflict, NotFound, ValidationFailed
from collabex.notifications.gate import has_match

logger = structlog.get_logger()

SWIPE_DIRECTIONS = ("left", "right")


async def get_candidates(db: AsyncSession, profile: Profile, limit: int = 20) -> list[Profile]:
    """Onboarded profiles the caller has not swiped on yet, excluding themself."""
    swiped = select(SwipeAction.swiped_id).where(SwipeAction.swiper_id == profile.id)
    result = await db.execute(
        select(Profile)
        .where(
            Profile.onboarding_completed.is_(True),
            Profile.id != profile.id,
            Profile.id.not_in(swiped),
        )
        .order_by(Profile.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def record_swipe(
    db: AsyncSession,
    swiper: Profile,
    swiped_id: uuid.UUID,
    direction: str,
) -> Match | None:
    """
    Record a swipe. Returns the Match if this swipe completed one.

    Raises:
        ValidationFailed: Bad direction or swiping on oneself.
        NotFound: Target profile does not exist.
        Conflict: Already swiped on this profile.
    """
    if direction not in SWIPE_DIRECTIONS:
        raise ValidationFailed(f"Invalid direction: {direction}. Must be one of {SWIPE_DIRECTIONS}")
    if swiped_id == swiper.id:
        raise ValidationFailed("Cannot swipe on yourself")
    if await db.get(Profile, swiped_id) is None:
        raise NotFound("Profile not found")

    existing = await db.execute(
        select(SwipeAction.id)
        .where(SwipeAction.swiper_id == swiper.id, SwipeAction.swiped_id == swiped_id)
        .limit(1)
    )
    if existing.scalar_one_or_none() is not None:
        raise Conflict("Already swiped on this profile")

    db.add(SwipeAction(swiper_id=swiper.id, swiped_id=swiped_id, direction=direction))
    await db.flush()

    if direction != "right":
        return None

    reciprocal = await db.execute(
        select(SwipeAction.id)
        .where(
            SwipeAction.swiper_id == swiped_id,
            SwipeAction.swiped_id == swiper.id,
            SwipeAction.direction == "right",
        )
        .limit(1)
    )
    if reciprocal.scalar_one_or_none() is None:
        return None
    if await has_match(db, swiper.id, swiped_id):
        return None

    match = Match(profile_a=swiper.id, profile_b=swiped_id)
    db.add(match)
    await db.flush()
    logger.info("match_created", match_id=str(match.id), profile_a=str(swiper.id), profile_b=str(swiped_id))
    return match


async def list_matches(db: AsyncSession, profile_id: uuid.UUID) -> list[Match]:
    """Matches involving the profile, newest first."""
    result = await db.execute(
        select(Match)
        .where(or_(Match.profile_a == profile_id, Match.profile_b == profile_id))
        .order_by(Match.created_at.desc())
    )
    return list(result.scalars().all())


def matched_partner(match: Match, profile_id: uuid.UUID) -> uuid.UUID:
    return match.profile_b if match.profile_a == profile_id else match.profile_a
