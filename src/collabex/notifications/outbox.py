"""Transactional outbox for secondary effects.

Primary writes (status transitions, applications, notification rows) enqueue an
OutboxEvent in the same session, so the effect is recorded iff the primary
write commits. ``process_outbox`` drains due events with exponential backoff.

Handler outcomes:
- returns normally      -> event done
- raises CollabExError  -> permanent failure, no retry
- raises anything else  -> retried until ``max_attempts``

Each handler runs in its own savepoint, so its writes roll back alone.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from collabex.db.models import Notification, OutboxEvent
from collabex.errors import CollabExError

logger = structlog.get_logger()

OUTBOX_KINDS = {"notification", "email"}
MAX_BACKOFF = timedelta(hours=1)

OutboxHandler = Callable[[AsyncSession, dict[str, Any]], Awaitable[Notification | None]]


@dataclass
class OutboxRunResult:
    """Summary of one drain pass."""

    done: int = 0
    retried: int = 0
    failed: int = 0
    notifications: list[Notification] = field(default_factory=list)


async def enqueue_event(db: AsyncSession, kind: str, payload: dict[str, Any]) -> OutboxEvent:
    """Queue a secondary effect. Caller commits together with the primary write."""
    if kind not in OUTBOX_KINDS:
        raise ValueError(f"Invalid outbox kind: {kind}. Must be one of {OUTBOX_KINDS}")
    event = OutboxEvent(
        kind=kind,
        payload=payload,
        status="pending",
        attempts=0,
        next_attempt_at=datetime.now(timezone.utc),
    )
    db.add(event)
    await db.flush()
    return event


def backoff_delay(attempts: int, base_seconds: int) -> timedelta:
    """Delay before the next attempt: base * 2^(attempts-1), capped at one hour."""
    delay = timedelta(seconds=base_seconds * (2 ** max(attempts - 1, 0)))
    return min(delay, MAX_BACKOFF)


async def process_outbox(
    db: AsyncSession,
    handlers: dict[str, OutboxHandler],
    *,
    batch_size: int = 50,
    max_attempts: int = 5,
    backoff_base_seconds: int = 30,
) -> OutboxRunResult:
    """Run every due pending event once. Caller commits."""
    now = datetime.now(timezone.utc)
    result = await db.execute(
        select(OutboxEvent)
        .where(OutboxEvent.status == "pending", OutboxEvent.next_attempt_at <= now)
        .order_by(OutboxEvent.created_at.asc())
        .limit(batch_size)
    )
    events = list(result.scalars().all())
    run = OutboxRunResult()

    for event in events:
        event_id, kind = str(event.id), event.kind
        event.attempts += 1
        attempts = event.attempts
        handler = handlers.get(kind)
        try:
            if handler is None:
                raise CollabExError(f"No handler for outbox kind {kind}")
            # Attempt accounting is flushed before the savepoint, so a failing
            # handler only rolls back its own writes.
            async with db.begin_nested():
                notification = await handler(db, event.payload)
        except CollabExError as e:
            event.status = "failed"
            event.last_error = e.message
            event.processed_at = datetime.now(timezone.utc)
            run.failed += 1
            logger.warning("outbox_event_rejected", event_id=event_id, kind=kind, reason=e.message)
            continue
        except Exception as e:
            event.last_error = f"{type(e).__name__}: {e}"
            if attempts >= max_attempts:
                event.status = "failed"
                event.processed_at = datetime.now(timezone.utc)
                run.failed += 1
                logger.error("outbox_event_exhausted", event_id=event_id, kind=kind, exc_info=True)
            else:
                event.next_attempt_at = datetime.now(timezone.utc) + backoff_delay(attempts, backoff_base_seconds)
                run.retried += 1
                logger.warning("outbox_event_retry", event_id=event_id, kind=kind, attempts=attempts, exc_info=True)
            continue

        event.status = "done"
        event.last_error = None
        event.processed_at = datetime.now(timezone.utc)
        run.done += 1
        if notification is not None:
            run.notifications.append(notification)

    await db.flush()
    if events:
        logger.info("outbox_drained", done=run.done, retried=run.retried, failed=run.failed)
    return run
