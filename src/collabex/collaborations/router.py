"""Collaboration and review API endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.auth.context import RequestContext
from collabex.auth.dependencies import get_profile_context
from collabex.collaborations.lifecycle import available_actions, partner_of, role_of
from collabex.collaborations.schemas import (
    CollaborationListResponse,
    CollaborationResponse,
    CreateCollaborationRequest,
    ProfileSummary,
    ReviewListResponse,
    ReviewResponse,
    SubmitReviewRequest,
    UpdateCollaborationStatusRequest,
)
from collabex.collaborations.service import (
    create_collaboration,
    list_collaborations,
    list_reviews,
    reviewed_partner_ids,
    submit_review,
    transition_collaboration,
)
from collabex.database import get_session
from collabex.db.models import Collaboration, Profile, Review
from collabex.profiles.service import profiles_by_id

router = APIRouter(prefix="/api/v1", tags=["Collaborations"])


def _summary(profile: Profile | None) -> ProfileSummary | None:
    if profile is None:
        return None
    return ProfileSummary(id=str(profile.id), display_name=profile.display_name, avatar_url=profile.avatar_url)


def _collab_response(
    collab: Collaboration,
    profile_id: uuid.UUID,
    partner: Profile | None,
    reviewed: set[uuid.UUID],
) -> CollaborationResponse:
    role = role_of(collab, profile_id)
    partner_id = partner_of(collab, profile_id)
    return CollaborationResponse(
        id=str(collab.id),
        title=collab.title,
        description=collab.description,
        status=collab.status,
        role=role,
        partner=_summary(partner),
        actions=available_actions(collab, role, partner_id in reviewed),
        created_at=collab.created_at,
        completed_at=collab.completed_at,
    )


def _review_response(r: Review) -> ReviewResponse:
    return ReviewResponse(
        id=str(r.id),
        reviewer_id=str(r.reviewer_id),
        reviewee_id=str(r.reviewee_id),
        collaboration_id=str(r.collaboration_id) if r.collaboration_id else None,
        rating=r.rating,
        content=r.content,
        created_at=r.created_at,
    )


@router.get("/collaborations", response_model=CollaborationListResponse)
async def get_my_collaborations(
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Collaborations the caller is party to, with the actions available to them."""
    me = ctx.profile_id
    collabs = await list_collaborations(db, me)
    partners = await profiles_by_id(db, {partner_of(c, me) for c in collabs})
    reviewed = await reviewed_partner_ids(db, me)
    return CollaborationListResponse(
        collaborations=[_collab_response(c, me, partners.get(partner_of(c, me)), reviewed) for c in collabs],
    )


@router.post("/collaborations", response_model=CollaborationResponse, status_code=201)
async def start_collaboration(
    body: CreateCollaborationRequest,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Propose a collaboration; the partner is notified."""
    me = ctx.require_profile()
    collab = await create_collaboration(db, me, body.partner_id, body.title, body.description)
    await db.commit()
    partner = await db.get(Profile, collab.profile_b)
    return _collab_response(collab, me.id, partner, set())


@router.post("/collaborations/{collaboration_id}/status", response_model=CollaborationResponse)
async def update_collaboration_status(
    collaboration_id: uuid.UUID,
    body: UpdateCollaborationStatusRequest,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Accept, decline, withdraw, or complete a collaboration."""
    me = ctx.require_profile()
    collab = await transition_collaboration(db, me, collaboration_id, body.status)
    await db.commit()
    partner_id = partner_of(collab, me.id)
    partner = await db.get(Profile, partner_id)
    reviewed = await reviewed_partner_ids(db, me.id)
    return _collab_response(collab, me.id, partner, reviewed)


@router.post("/collaborations/{collaboration_id}/review", response_model=ReviewResponse, status_code=201)
async def review_collaboration(
    collaboration_id: uuid.UUID,
    body: SubmitReviewRequest,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Leave the one review allowed per partner."""
    review = await submit_review(db, ctx.require_profile(), collaboration_id, body.rating, body.content)
    await db.commit()
    return _review_response(review)


@router.get("/profiles/{profile_id}/reviews", response_model=ReviewListResponse)
async def get_profile_reviews(
    profile_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
):
    """Public reviews received by a profile."""
    reviews = await list_reviews(db, profile_id)
    average = round(sum(r.rating for r in reviews) / len(reviews), 2) if reviews else None
    return ReviewListResponse(reviews=[_review_response(r) for r in reviews], average_rating=average)
