"""verify-social-platform function endpoint."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.auth.dependencies import authenticate, bearer_scheme
from collabex.database import get_session
from collabex.errors import CollabExError
from collabex.functions import GENERIC_ERROR, error_response, first_validation_message, read_json_body
from collabex.verification.schemas import FIELD_MESSAGES, VerifyPlatformRequest, VerifyPlatformResponse
from collabex.verification.service import verify_social_platform

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/functions", tags=["Functions"])


def _failure(status_code: int, message: str):  # noqa: ANN202
    return error_response(status_code, {"success": False, "verified": False, "error": message})


@router.post(
    "/verify-social-platform",
    response_model=VerifyPlatformResponse,
    response_model_exclude_none=True,
    response_model_by_alias=True,
)
async def verify_social_platform_function(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
    db: AsyncSession = Depends(get_session),
):
    """Verify a claimed social account owned by the caller."""
    try:
        identity = authenticate(credentials)
        body = VerifyPlatformRequest.model_validate(await read_json_body(request))
    except CollabExError as e:
        return _failure(e.status_code, e.message)
    except ValidationError as e:
        return _failure(400, first_validation_message(e, FIELD_MESSAGES, "platformId"))

    try:
        result = await verify_social_platform(db, identity, body)
        await db.commit()
    except CollabExError as e:
        await db.rollback()
        return _failure(e.status_code, e.message)
    except Exception:
        await db.rollback()
        logger.exception("verify_social_platform_failed", platform_id=body.platform_id)
        return _failure(500, GENERIC_ERROR)

    return VerifyPlatformResponse(
        success=True,
        verified=result.valid,
        display_name=result.display_name,
        error=result.error,
    )
