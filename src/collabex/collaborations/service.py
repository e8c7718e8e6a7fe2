"""Collaboration and review service.

Status writes and their notifications share one transaction: the notification
is an outbox row, so it exists iff the status write commits, and delivery
failures are retried by the worker rather than reported to the actor.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.collaborations.lifecycle import apply_status, partner_of, role_of, validate_transition
from collabex.db.models import Collaboration, Profile, Review
from collabex.errors import Conflict, NotFound, ValidationFailed
from collabex.notifications.dispatch import queue_notification, sender_display_name
from collabex.notifications.payloads import CollabAcceptedData, CollabCompletedData, CollabRequestData

logger = logging.getLogger(__name__)


async def get_collaboration(db: AsyncSession, collaboration_id: uuid.UUID) -> Collaboration:
    collab = await db.get(Collaboration, collaboration_id)
    if collab is None:
        raise NotFound("Collaboration not found")
    return collab


async def create_collaboration(
    db: AsyncSession,
    actor: Profile,
    partner_id: uuid.UUID,
    title: str,
    description: str | None = None,
) -> Collaboration:
    """Start a pending collaboration with ``partner_id`` and queue collab_request."""
    if partner_id == actor.id:
        raise ValidationFailed("Cannot collaborate with yourself")
    partner = await db.get(Profile, partner_id)
    if partner is None:
        raise NotFound("Partner profile not found")

    collab = Collaboration(
        profile_a=actor.id,
        profile_b=partner.id,
        title=title.strip(),
        description=(description or "").strip() or None,
        status="pending",
    )
    db.add(collab)
    await db.flush()

    await queue_notification(
        db,
        actor,
        partner,
        "collab_request",
        "New Collaboration Request",
        f'{sender_display_name(actor)} wants to collaborate with you on "{collab.title}"',
        CollabRequestData(collaboration_id=collab.id, collaboration_title=collab.title),
    )
    logger.info("Collaboration %s created: %s -> %s", collab.id, actor.id, partner.id)
    return collab


async def transition_collaboration(
    db: AsyncSession,
    actor: Profile,
    collaboration_id: uuid.UUID,
    target: str,
) -> Collaboration:
    """
    Move a collaboration to ``target`` on behalf of ``actor``. Caller commits.

    Raises:
        NotFound: No such collaboration.
        Forbidden: Actor is not a party.
        Conflict: Transition not allowed for the actor's role.
    """
    collab = await get_collaboration(db, collaboration_id)
    role = role_of(collab, actor.id)
    previous = collab.status
    validate_transition(previous, role, target)

    apply_status(collab, target)
    await db.flush()

    partner = await db.get(Profile, partner_of(collab, actor.id))
    if partner is None:
        logger.warning("Collaboration %s partner profile missing; no notification queued", collab.id)
        return collab

    name = sender_display_name(actor)
    if previous == "pending" and target == "in_progress":
        await queue_notification(
            db, actor, partner, "collab_accepted",
            "Collaboration Accepted",
            f'{name} accepted your collaboration request "{collab.title or "Untitled Collaboration"}"',
            CollabAcceptedData(collaboration_id=collab.id),
        )
    elif target == "completed":
        await queue_notification(
            db, actor, partner, "collab_completed",
            "Collaboration Completed",
            f'{name} marked "{collab.title or "Untitled Collaboration"}" as completed',
            CollabCompletedData(collaboration_id=collab.id),
        )

    logger.info("Collaboration %s: %s -> %s by %s", collab.id, previous, target, role)
    return collab


async def list_collaborations(db: AsyncSession, profile_id: uuid.UUID) -> list[Collaboration]:
    """Collaborations the profile is party to, newest first."""
    result = await db.execute(
        select(Collaboration)
        .where(or_(Collaboration.profile_a == profile_id, Collaboration.profile_b == profile_id))
        .order_by(Collaboration.created_at.desc())
    )
    return list(result.scalars().all())


async def reviewed_partner_ids(db: AsyncSession, reviewer_id: uuid.UUID) -> set[uuid.UUID]:
    """Reviewees the profile has already reviewed."""
    result = await db.execute(select(Review.reviewee_id).where(Review.reviewer_id == reviewer_id))
    return set(result.scalars().all())


async def has_reviewed(db: AsyncSession, reviewer_id: uuid.UUID, reviewee_id: uuid.UUID) -> bool:
    result = await db.execute(
        select(Review.id).where(Review.reviewer_id == reviewer_id, Review.reviewee_id == reviewee_id).limit(1)
    )
    return result.scalar_one_or_none() is not None


async def submit_review(
    db: AsyncSession,
    actor: Profile,
    collaboration_id: uuid.UUID,
    rating: int,
    content: str | None = None,
) -> Review:
    """
    Review the partner of a completed collaboration, once per partner.

    Raises:
        ValidationFailed: Rating outside 1-5.
        Conflict: Collaboration not completed, or partner already reviewed.
    """
    if not 1 <= rating <= 5:
        raise ValidationFailed("Rating must be between 1 and 5")

    collab = await get_collaboration(db, collaboration_id)
    role_of(collab, actor.id)
    if collab.status != "completed":
        raise Conflict("Only completed collaborations can be reviewed")

    reviewee_id = partner_of(collab, actor.id)
    if await has_reviewed(db, actor.id, reviewee_id):
        raise Conflict("You have already reviewed this collaborator")

    review = Review(
        reviewer_id=actor.id,
        reviewee_id=reviewee_id,
        collaboration_id=collab.id,
        rating=rating,
        content=(content or "").strip() or None,
    )
    db.add(review)
    try:
        await db.flush()
    except IntegrityError as e:
        raise Conflict("You have already reviewed this collaborator") from e
    return review


async def list_reviews(db: AsyncSession, reviewee_id: uuid.UUID) -> list[Review]:
    """Reviews received by a profile, newest first."""
    result = await db.execute(
        select(Review).where(Review.reviewee_id == reviewee_id).order_by(Review.created_at.desc())
    )
    return list(result.scalars().all())
