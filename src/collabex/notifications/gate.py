"""Relationship gate: may ``sender`` notify ``recipient``?

Allowed when any of these rows exist:
1. a match on the unordered pair
2. a collaboration on the unordered pair (any status)
3. an application by the sender to a post authored by the recipient
4. for collab_interest only: any post authored by the recipient

Checks run in that order and stop at the first hit. Query errors propagate so
callers fail closed.
"""

from __future__ import annotations

import uuid

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.db.models import CollabApplication, CollabPost, Collaboration, Match


def _pair(model: type[Match] | type[Collaboration], a: uuid.UUID, b: uuid.UUID):  # noqa: ANN202
    return or_(
        and_(model.profile_a == a, model.profile_b == b),
        and_(model.profile_a == b, model.profile_b == a),
    )


async def has_match(db: AsyncSession, a: uuid.UUID, b: uuid.UUID) -> bool:
    result = await db.execute(select(Match.id).where(_pair(Match, a, b)).limit(1))
    return result.scalar_one_or_none() is not None


async def has_collaboration(db: AsyncSession, a: uuid.UUID, b: uuid.UUID) -> bool:
    result = await db.execute(select(Collaboration.id).where(_pair(Collaboration, a, b)).limit(1))
    return result.scalar_one_or_none() is not None


async def has_applied_to_author(db: AsyncSession, applicant_id: uuid.UUID, author_id: uuid.UUID) -> bool:
    result = await db.execute(
        select(CollabApplication.id)
        .join(CollabPost, CollabPost.id == CollabApplication.post_id)
        .where(CollabApplication.applicant_id == applicant_id, CollabPost.author_id == author_id)
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def has_any_post(db: AsyncSession, author_id: uuid.UUID) -> bool:
    result = await db.execute(select(CollabPost.id).where(CollabPost.author_id == author_id).limit(1))
    return result.scalar_one_or_none() is not None


async def can_notify(
    db: AsyncSession,
    sender_profile_id: uuid.UUID,
    recipient_profile_id: uuid.UUID,
    type_: str,
) -> bool:
    """Return True if the sender has a relationship that permits notifying the recipient."""
    if await has_match(db, sender_profile_id, recipient_profile_id):
        return True
    if await has_collaboration(db, sender_profile_id, recipient_profile_id):
        return True
    if await has_applied_to_author(db, sender_profile_id, recipient_profile_id):
        return True
    return type_ == "collab_interest" and await has_any_post(db, recipient_profile_id)
