"""Health, readiness, and version endpoints."""

from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.config import get_settings
from collabex.database import get_session
from collabex.redis_client import get_redis
from collabex.ws.manager import manager

router = APIRouter()


async def _probe(check: Callable[[], Awaitable[object]]) -> str:
    try:
        await check()
    except Exception as exc:
        return f"error: {type(exc).__name__}"
    return "ok"


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: 200 while the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict[str, object]:
    """Readiness probe.

    Always 200; ``status`` is ``degraded`` when the database or Redis is
    unreachable. Error strings carry the exception class only.
    """
    checks = {
        "database": await _probe(lambda: db.execute(text("SELECT 1"))),
        "redis": await _probe(lambda: get_redis().ping()),
    }
    status = "ready" if all(v == "ok" for v in checks.values()) else "degraded"
    return {"status": status, "checks": checks, "websockets": manager.get_stats()}


@router.get("/version")
async def version() -> dict[str, str]:
    settings = get_settings()
    return {"version": settings.app_version, "environment": settings.environment}
