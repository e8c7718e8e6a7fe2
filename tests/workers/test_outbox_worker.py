"""Tests for the outbox arq worker."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select

from collabex.db.models import Notification
from collabex.notifications.dispatch import queue_notification
from collabex.notifications.worker import OutboxWorkerSettings, drain_outbox, process_outbox_job
from factories import make_match, make_profile


class TestWorkerSettings:
    def test_job_registered(self):
        assert process_outbox_job in OutboxWorkerSettings.functions
        assert len(OutboxWorkerSettings.cron_jobs) == 1

    def test_one_drain_at_a_time(self):
        assert OutboxWorkerSettings.max_jobs == 1


class TestDrain:
    @pytest.mark.asyncio
    async def test_drain_commits_and_publishes(self, db_session, monkeypatch):
        alice = await make_profile(db_session, "Alice")
        bob = await make_profile(db_session, "Bob")
        await make_match(db_session, alice, bob)
        await queue_notification(db_session, alice, bob, "collab_request", "New Collaboration Request", "Hi Bob")
        await db_session.commit()

        publish = AsyncMock()
        monkeypatch.setattr("collabex.notifications.worker.publish_notification", publish)

        done = await process_outbox_job({})

        assert done == 1
        publish.assert_awaited_once()
        result = await db_session.execute(select(Notification))
        notification = result.scalar_one()
        assert notification.user_id == bob.user_id
        assert publish.await_args.args[0].id == notification.id

    @pytest.mark.asyncio
    async def test_empty_outbox(self, db_session):
        run = await drain_outbox()
        assert (run.done, run.retried, run.failed) == (0, 0, 0)
        assert run.notifications == []
