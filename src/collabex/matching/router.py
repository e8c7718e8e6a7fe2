"""Matching API endpoints: candidate feed, swipes, matches."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.auth.context import RequestContext
from collabex.auth.dependencies import get_profile_context
from collabex.config import get_settings
from collabex.database import get_session
from collabex.db.models import Profile
from collabex.matching.schemas import (
    CandidateListResponse,
    CandidateResponse,
    MatchListResponse,
    MatchResponse,
    SwipeRequest,
    SwipeResponse,
)
from collabex.matching.service import get_candidates, list_matches, matched_partner, record_swipe
from collabex.profiles.service import profiles_by_id

router = APIRouter(prefix="/api/v1/matching", tags=["Matching"])


def _candidate(profile: Profile) -> CandidateResponse:
    return CandidateResponse(
        id=str(profile.id),
        display_name=profile.display_name,
        bio=profile.bio,
        location=profile.location,
        avatar_url=profile.avatar_url,
        account_type=profile.account_type,
        audience_tier=profile.audience_tier,
        niches=sorted(n.niche for n in profile.niches),
    )


@router.get("/candidates", response_model=CandidateListResponse)
async def get_candidate_feed(
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Profiles to swipe on."""
    candidates = await get_candidates(db, ctx.require_profile(), get_settings().candidate_feed_limit)
    return CandidateListResponse(candidates=[_candidate(p) for p in candidates])


@router.post("/swipes", response_model=SwipeResponse, status_code=201)
async def swipe(
    body: SwipeRequest,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Record a swipe; reports whether it completed a match."""
    match = await record_swipe(db, ctx.require_profile(), body.profile_id, body.direction)
    await db.commit()
    return SwipeResponse(matched=match is not None, match_id=str(match.id) if match else None)


@router.get("/matches", response_model=MatchListResponse)
async def get_matches(
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    me = ctx.profile_id
    matches = await list_matches(db, me)
    partners = await profiles_by_id(db, {matched_partner(m, me) for m in matches})
    items = []
    for m in matches:
        partner = partners.get(matched_partner(m, me))
        items.append(MatchResponse(
            id=str(m.id),
            partner=_candidate(partner) if partner else None,
            created_at=m.created_at,
        ))
    return MatchListResponse(matches=items)
