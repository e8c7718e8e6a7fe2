"""Collab post and application API endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.auth.context import RequestContext
from collabex.auth.dependencies import get_profile_context
from collabex.config import get_settings
from collabex.database import get_session
from collabex.db.models import CollabApplication, CollabPost, Profile
from collabex.posts.schemas import (
    ApplicationListResponse,
    ApplicationResponse,
    ApplyRequest,
    CreatePostRequest,
    PostListResponse,
    PostResponse,
    UpdatePostStatusRequest,
)
from collabex.posts.service import (
    apply_to_post,
    create_post,
    get_post,
    list_applications,
    list_open_posts,
    list_posts_by_author,
    update_post_status,
)
from collabex.profiles.service import profiles_by_id

router = APIRouter(prefix="/api/v1/posts", tags=["Posts"])


def _post_response(post: CollabPost, author: Profile | None = None) -> PostResponse:
    return PostResponse(
        id=str(post.id),
        author_id=str(post.author_id),
        author_name=author.display_name if author else None,
        title=post.title,
        description=post.description,
        requirements=post.requirements,
        niche=post.niche,
        platforms=post.platforms or [],
        deadline=post.deadline,
        status=post.status,
        created_at=post.created_at,
    )


def _application_response(app: CollabApplication, applicant: Profile | None = None) -> ApplicationResponse:
    return ApplicationResponse(
        id=str(app.id),
        post_id=str(app.post_id),
        applicant_id=str(app.applicant_id),
        applicant_name=applicant.display_name if applicant else None,
        message=app.message,
        status=app.status,
        created_at=app.created_at,
    )


@router.get("", response_model=PostListResponse)
async def browse_posts(
    niche: str | None = Query(None, max_length=64),
    _ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Open posts, newest first."""
    posts = await list_open_posts(db, get_settings().post_list_limit, niche)
    authors = await profiles_by_id(db, {p.author_id for p in posts})
    return PostListResponse(posts=[_post_response(p, authors.get(p.author_id)) for p in posts])


@router.post("", response_model=PostResponse, status_code=201)
async def publish_post(
    body: CreatePostRequest,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    me = ctx.require_profile()
    post = await create_post(
        db, me, body.title, body.description, body.requirements, body.niche, body.platforms, body.deadline,
    )
    await db.commit()
    return _post_response(post, me)


@router.get("/mine", response_model=PostListResponse)
async def get_my_posts(
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    me = ctx.require_profile()
    posts = await list_posts_by_author(db, me.id)
    return PostListResponse(posts=[_post_response(p, me) for p in posts])


@router.get("/{post_id}", response_model=PostResponse)
async def get_post_detail(
    post_id: uuid.UUID,
    _ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    post = await get_post(db, post_id)
    author = await db.get(Profile, post.author_id)
    return _post_response(post, author)


@router.patch("/{post_id}/status", response_model=PostResponse)
async def change_post_status(
    post_id: uuid.UUID,
    body: UpdatePostStatusRequest,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Author-only: open, mark in progress, or close a post."""
    me = ctx.require_profile()
    post = await update_post_status(db, me, post_id, body.status)
    await db.commit()
    return _post_response(post, me)


@router.post("/{post_id}/applications", response_model=ApplicationResponse, status_code=201)
async def show_interest(
    post_id: uuid.UUID,
    body: ApplyRequest | None = None,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Show interest in a post; its author is notified."""
    me = ctx.require_profile()
    application = await apply_to_post(db, me, post_id, body.message if body else None)
    await db.commit()
    return _application_response(application, me)


@router.get("/{post_id}/applications", response_model=ApplicationListResponse)
async def get_post_applications(
    post_id: uuid.UUID,
    ctx: RequestContext = Depends(get_profile_context),
    db: AsyncSession = Depends(get_session),
):
    """Author-only list of applications on a post."""
    applications = await list_applications(db, ctx.require_profile(), post_id)
    applicants = await profiles_by_id(db, {a.applicant_id for a in applications})
    return ApplicationListResponse(
        applications=[_application_response(a, applicants.get(a.applicant_id)) for a in applications],
    )
