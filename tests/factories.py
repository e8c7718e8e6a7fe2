"""Row builders and auth helpers for tests.

Every builder commits, so rows are visible to the app's own sessions.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from collabex.auth.jwt import create_access_token
from collabex.db.models import (
    CollabApplication,
    CollabPost,
    Collaboration,
    Match,
    Profile,
    SocialPlatform,
)


def auth_headers(user_id: uuid.UUID | str, email: str | None = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id, email)}"}


def headers_for(profile: Profile) -> dict[str, str]:
    return auth_headers(profile.user_id, profile.email)


async def reload(db: AsyncSession, model, pk):  # noqa: ANN001, ANN201
    """Re-read a row the app changed through its own session."""
    return await db.get(model, pk, populate_existing=True)


async def make_profile(
    db: AsyncSession,
    display_name: str = "Alice",
    email: str | None = None,
    account_type: str = "influencer",
    onboarding_completed: bool = True,
) -> Profile:
    profile = Profile(
        user_id=uuid.uuid4(),
        email=email,
        display_name=display_name,
        account_type=account_type,
        onboarding_completed=onboarding_completed,
        payment_preferences={},
        niches=[],
    )
    db.add(profile)
    await db.commit()
    return profile


async def make_match(db: AsyncSession, a: Profile, b: Profile) -> Match:
    match = Match(profile_a=a.id, profile_b=b.id)
    db.add(match)
    await db.commit()
    return match


async def make_collaboration(
    db: AsyncSession,
    requester: Profile,
    recipient: Profile,
    status: str = "pending",
    title: str = "Summer Launch",
) -> Collaboration:
    collab = Collaboration(
        profile_a=requester.id,
        profile_b=recipient.id,
        title=title,
        status=status,
        completed_at=datetime.now(timezone.utc) if status == "completed" else None,
    )
    db.add(collab)
    await db.commit()
    return collab


async def make_post(
    db: AsyncSession, author: Profile, title: str = "Looking for a fitness creator", status: str = "open",
) -> CollabPost:
    post = CollabPost(author_id=author.id, title=title, description="Two reels in June", status=status, platforms=[])
    db.add(post)
    await db.commit()
    return post


async def make_application(db: AsyncSession, post: CollabPost, applicant: Profile) -> CollabApplication:
    application = CollabApplication(post_id=post.id, applicant_id=applicant.id, status="pending")
    db.add(application)
    await db.commit()
    return application


async def make_platform(
    db: AsyncSession,
    owner: Profile,
    platform_name: str = "Instagram",
    handle: str = "alice",
    url: str | None = None,
) -> SocialPlatform:
    platform = SocialPlatform(
        profile_id=owner.id, platform_name=platform_name, handle=handle, url=url, is_verified=False,
    )
    db.add(platform)
    await db.commit()
    return platform
