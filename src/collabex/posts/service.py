"""Collab post and application service."""

from __future__ import annotations

import uuid
from datetime import date

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.db.models import CollabApplication, CollabPost, Profile
from collabex.errors import Conflict, Forbidden, NotFound, ValidationFailed
from collabex.notifications.dispatch import queue_notification
from collabex.notifications.payloads import CollabInterestData

logger = structlog.get_logger()

POST_STATUSES = ("open", "in_progress", "closed")

ALREADY_APPLIED = "You've already shown interest in this collaboration"


async def create_post(
    db: AsyncSession,
    author: Profile,
    title: str,
    description: str,
    requirements: str | None = None,
    niche: str | None = None,
    platforms: list[str] | None = None,
    deadline: date | None = None,
) -> CollabPost:
    post = CollabPost(
        author_id=author.id,
        title=title.strip(),
        description=description.strip(),
        requirements=(requirements or "").strip() or None,
        niche=niche,
        platforms=platforms or [],
        deadline=deadline,
        status="open",
    )
    db.add(post)
    await db.flush()
    logger.info("post_created", post_id=str(post.id), author_id=str(author.id))
    return post


async def get_post(db: AsyncSession, post_id: uuid.UUID) -> CollabPost:
    post = await db.get(CollabPost, post_id)
    if post is None:
        raise NotFound("Post not found")
    return post


async def list_open_posts(db: AsyncSession, limit: int = 50, niche: str | None = None) -> list[CollabPost]:
    """Open posts, newest first."""
    query = select(CollabPost).where(CollabPost.status == "open")
    if niche:
        query = query.where(CollabPost.niche == niche)
    result = await db.execute(query.order_by(CollabPost.created_at.desc()).limit(limit))
    return list(result.scalars().all())


async def list_posts_by_author(db: AsyncSession, author_id: uuid.UUID) -> list[CollabPost]:
    result = await db.execute(
        select(CollabPost).where(CollabPost.author_id == author_id).order_by(CollabPost.created_at.desc())
    )
    return list(result.scalars().all())


async def update_post_status(db: AsyncSession, author: Profile, post_id: uuid.UUID, status: str) -> CollabPost:
    """Author-only status change."""
    if status not in POST_STATUSES:
        raise ValidationFailed(f"Invalid post status: {status}. Must be one of {POST_STATUSES}")
    post = await get_post(db, post_id)
    if post.author_id != author.id:
        raise Forbidden("Only the author can update this post")
    post.status = status
    await db.flush()
    return post


async def apply_to_post(
    db: AsyncSession,
    applicant: Profile,
    post_id: uuid.UUID,
    message: str | None = None,
) -> CollabApplication:
    """
    Record interest in a post and queue a collab_interest notification to its author.

    Raises:
        NotFound: No such post.
        ValidationFailed: Applying to one's own post, or the post is not open.
        Conflict: The applicant already applied.
    """
    post = await get_post(db, post_id)
    if post.author_id == applicant.id:
        raise ValidationFailed("You cannot show interest in your own post")
    if post.status != "open":
        raise ValidationFailed("This collaboration is no longer accepting interest")

    existing = await db.execute(
        select(CollabApplication.id)
        .where(CollabApplication.post_id == post.id, CollabApplication.applicant_id == applicant.id)
        .limit(1)
    )
    if existing.scalar_one_or_none() is not None:
        raise Conflict(ALREADY_APPLIED)

    application = CollabApplication(
        post_id=post.id,
        applicant_id=applicant.id,
        message=(message or "").strip() or None,
        status="pending",
    )
    db.add(application)
    try:
        await db.flush()
    except IntegrityError as e:
        raise Conflict(ALREADY_APPLIED) from e

    author = await db.get(Profile, post.author_id)
    if author is not None:
        await queue_notification(
            db,
            applicant,
            author,
            "collab_interest",
            "Someone's Interested!",
            f'{applicant.display_name or "An influencer"} is interested in your collab: "{post.title}"',
            CollabInterestData(post_id=post.id, post_title=post.title),
        )
    logger.info("post_application_created", post_id=str(post.id), applicant_id=str(applicant.id))
    return application


async def list_applications(db: AsyncSession, author: Profile, post_id: uuid.UUID) -> list[CollabApplication]:
    """Applications on a post, visible to its author only."""
    post = await get_post(db, post_id)
    if post.author_id != author.id:
        raise Forbidden("Only the author can view applications")
    result = await db.execute(
        select(CollabApplication)
        .where(CollabApplication.post_id == post.id)
        .order_by(CollabApplication.created_at.desc())
    )
    return list(result.scalars().all())
