"""Outbox arq worker: drains queued notifications and emails.

Import path for arq CLI: arq collabex.notifications.worker.OutboxWorkerSettings
"""

from __future__ import annotations

import logging

from arq import cron
from arq.connections import RedisSettings

from collabex.config import get_settings
from collabex.database import close_db, get_session_factory, init_db
from collabex.notifications.dispatch import OUTBOX_HANDLERS
from collabex.notifications.outbox import OutboxRunResult, process_outbox
from collabex.notifications.service import publish_notification
from collabex.redis_client import close_redis, init_redis

logger = logging.getLogger(__name__)


async def drain_outbox() -> OutboxRunResult:
    """One drain pass in its own session; commits, then pushes new notifications."""
    settings = get_settings()
    async with get_session_factory()() as db:
        run = await process_outbox(
            db,
            OUTBOX_HANDLERS,
            batch_size=settings.outbox_batch_size,
            max_attempts=settings.outbox_max_attempts,
            backoff_base_seconds=settings.outbox_backoff_base_seconds,
        )
        await db.commit()

    for notification in run.notifications:
        await publish_notification(notification)
    return run


async def process_outbox_job(ctx: dict) -> int:  # type: ignore[type-arg]
    """Scheduled task: run every due outbox event once."""
    run = await drain_outbox()
    return run.done


async def outbox_startup(ctx: dict) -> None:  # type: ignore[type-arg]
    """Initialize DB + Redis connections on worker startup."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)
    logger.info("Outbox worker started")


async def outbox_shutdown(ctx: dict) -> None:  # type: ignore[type-arg]
    """Clean up on worker shutdown."""
    await close_redis()
    await close_db()
    logger.info("Outbox worker shut down")


class OutboxWorkerSettings:
    """arq worker settings for the notification outbox."""

    functions = [process_outbox_job]
    cron_jobs = [cron(process_outbox_job, second={0}, run_at_startup=True)]
    on_startup = outbox_startup
    on_shutdown = outbox_shutdown
    redis_settings = RedisSettings.from_dsn(get_settings().redis_url)
    max_jobs = 1
    job_timeout = 120
