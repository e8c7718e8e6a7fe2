"""FastAPI authentication dependencies."""

from __future__ import annotations

import uuid

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.auth.context import Identity, RequestContext
from collabex.auth.jwt import verify_token
from collabex.database import get_session
from collabex.db.models import Profile
from collabex.errors import Unauthorized

# auto_error=False: a missing header must be a 401, not a 403
bearer_scheme = HTTPBearer(auto_error=False)


def authenticate(credentials: HTTPAuthorizationCredentials | None) -> Identity:
    """
    Verify the bearer credential and return the caller's identity.

    Raises:
        Unauthorized: If the header is missing or the token does not verify.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Unauthorized - missing authorization header")
    try:
        payload = verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        raise Unauthorized("Unauthorized - invalid token") from e
    return Identity(user_id=uuid.UUID(str(payload["sub"])), email=payload.get("email"))


async def get_profile_by_user_id(db: AsyncSession, user_id: uuid.UUID) -> Profile | None:
    """Resolve the profile owned by an identity."""
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return result.scalar_one_or_none()


async def build_context(db: AsyncSession, identity: Identity) -> RequestContext:
    """Attach the caller's profile (if any) to their identity."""
    profile = await get_profile_by_user_id(db, identity.user_id)
    return RequestContext(identity=identity, profile=profile)


async def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> Identity:
    """Dependency: verified identity only (no profile lookup)."""
    return authenticate(credentials)


async def get_request_context(
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_session),
) -> RequestContext:
    """Dependency: identity plus resolved profile. Profile may be absent."""
    return await build_context(db, identity)


async def get_profile_context(
    ctx: RequestContext = Depends(get_request_context),
) -> RequestContext:
    """
    Same as get_request_context but requires an existing profile.

    Raises 403 when the identity has not created a profile yet.
    """
    ctx.require_profile()
    return ctx
