"""FastAPI application factory."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from collabex.collaborations.router import router as collaborations_router
from collabex.config import get_settings
from collabex.database import close_db, init_db
from collabex.health.router import router as health_router
from collabex.matching.router import router as matching_router
from collabex.messaging.router import router as messaging_router
from collabex.middleware import setup_middleware
from collabex.notifications.router import functions_router as notification_functions_router
from collabex.notifications.router import router as notifications_router
from collabex.posts.router import router as posts_router
from collabex.profiles.router import router as profiles_router
from collabex.redis_client import close_redis, get_redis, init_redis
from collabex.verification.router import router as verification_router
from collabex.ws.bridge import PubSubBridge
from collabex.ws.router import router as ws_router


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    # Start the Redis pub/sub -> WebSocket bridge
    bridge = PubSubBridge(get_redis())
    bridge_task = asyncio.create_task(bridge.start())

    yield

    await bridge.stop()
    bridge_task.cancel()
    try:
        await bridge_task
    except asyncio.CancelledError:
        pass

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="CollabEx API",
        description="Backend API for CollabEx, the influencer and brand collaboration marketplace",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(profiles_router)
    app.include_router(matching_router)
    app.include_router(collaborations_router)
    app.include_router(posts_router)
    app.include_router(messaging_router)
    app.include_router(notifications_router)
    app.include_router(notification_functions_router)
    app.include_router(verification_router)
    app.include_router(ws_router)

    return app


app = create_app()
