"""Ownership check and verification state for claimed social accounts."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import httpx
import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.auth.context import Identity
from collabex.config import get_settings
from collabex.db.models import Profile, SocialPlatform
from collabex.errors import Forbidden, NotFound
from collabex.verification.platforms import VerificationResult, verify
from collabex.verification.schemas import VerifyPlatformRequest

logger = structlog.get_logger()


async def profile_url_exists(url: str, timeout: float) -> bool:
    """Fetch ``url``; only a 2xx/3xx final response counts as proof the profile exists."""
    try:
        async with httpx.AsyncClient(follow_redirects=True, timeout=timeout) as client:
            response = await client.get(url)
    except httpx.HTTPError:
        logger.warning("verification_fetch_failed", url=url, exc_info=True)
        return False
    return 200 <= response.status_code < 400


async def load_owned_platform(db: AsyncSession, identity: Identity, platform_id: uuid.UUID) -> SocialPlatform:
    """
    Load a social platform row owned by the caller.

    Raises:
        NotFound: No such platform.
        Forbidden: The platform belongs to another identity.
    """
    platform = await db.get(SocialPlatform, platform_id)
    if platform is None:
        raise NotFound("Platform not found")
    owner = await db.get(Profile, platform.profile_id)
    if owner is None or owner.user_id != identity.user_id:
        raise Forbidden("Unauthorized - not your platform")
    return platform


async def verify_social_platform(
    db: AsyncSession, identity: Identity, request: VerifyPlatformRequest,
) -> VerificationResult:
    """Run the matcher for the caller's platform and record success. Caller commits."""
    platform = await load_owned_platform(db, identity, uuid.UUID(request.platform_id))

    result = verify(request.platform_name, request.handle, request.url)
    settings = get_settings()
    if result.valid and settings.verification_live_check and result.profile_url:
        if not await profile_url_exists(result.profile_url, settings.outbound_timeout_seconds):
            result = VerificationResult(valid=False, error="Could not confirm that this profile exists")

    logger.info(
        "platform_verification",
        platform_id=str(platform.id),
        platform_name=request.platform_name,
        verified=result.valid,
    )
    if result.valid:
        platform.is_verified = True
        platform.verified_at = datetime.now(timezone.utc)
        await db.flush()
    return result
