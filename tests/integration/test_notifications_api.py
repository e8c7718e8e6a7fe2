"""Integration tests for the notification inbox."""

from __future__ import annotations

import uuid

import pytest

from collabex.notifications.service import create_notification
from factories import auth_headers


async def _seed(db, user_id: uuid.UUID, count: int = 3) -> list:
    rows = []
    for i in range(count):
        rows.append(await create_notification(db, user_id, "collab_request", f"Request {i}", "Hello"))
    await db.commit()
    return rows


class TestNotificationsAPI:
    """Inbox endpoints only ever touch the caller's rows."""

    @pytest.mark.asyncio
    async def test_list_newest_first_with_unread_count(self, client, db_session):
        user_id = uuid.uuid4()
        await _seed(db_session, user_id)
        await _seed(db_session, uuid.uuid4(), count=1)

        response = await client.get("/api/v1/notifications", headers=auth_headers(user_id))

        assert response.status_code == 200
        data = response.json()
        assert [n["title"] for n in data["notifications"]] == ["Request 2", "Request 1", "Request 0"]
        assert data["unread_count"] == 3

    @pytest.mark.asyncio
    async def test_unread_count(self, client, db_session):
        user_id = uuid.uuid4()
        await _seed(db_session, user_id, count=2)
        response = await client.get("/api/v1/notifications/unread-count", headers=auth_headers(user_id))
        assert response.json() == {"unread_count": 2}

    @pytest.mark.asyncio
    async def test_mark_one_read(self, client, db_session):
        user_id = uuid.uuid4()
        rows = await _seed(db_session, user_id, count=2)

        response = await client.post(f"/api/v1/notifications/{rows[0].id}/read", headers=auth_headers(user_id))
        assert response.status_code == 200

        count = await client.get("/api/v1/notifications/unread-count", headers=auth_headers(user_id))
        assert count.json()["unread_count"] == 1

    @pytest.mark.asyncio
    async def test_mark_all_read(self, client, db_session):
        user_id = uuid.uuid4()
        await _seed(db_session, user_id)

        response = await client.post("/api/v1/notifications/read-all", headers=auth_headers(user_id))
        assert response.json() == {"detail": "Marked 3 notifications as read"}

        count = await client.get("/api/v1/notifications/unread-count", headers=auth_headers(user_id))
        assert count.json()["unread_count"] == 0

    @pytest.mark.asyncio
    async def test_cannot_touch_someone_elses_notification(self, client, db_session):
        owner = uuid.uuid4()
        rows = await _seed(db_session, owner, count=1)
        intruder = auth_headers(uuid.uuid4())

        assert (await client.post(f"/api/v1/notifications/{rows[0].id}/read", headers=intruder)).status_code == 404
        assert (await client.delete(f"/api/v1/notifications/{rows[0].id}", headers=intruder)).status_code == 404

        listing = await client.get("/api/v1/notifications", headers=auth_headers(owner))
        assert len(listing.json()["notifications"]) == 1

    @pytest.mark.asyncio
    async def test_delete(self, client, db_session):
        user_id = uuid.uuid4()
        rows = await _seed(db_session, user_id, count=1)

        response = await client.delete(f"/api/v1/notifications/{rows[0].id}", headers=auth_headers(user_id))
        assert response.status_code == 200

        listing = await client.get("/api/v1/notifications", headers=auth_headers(user_id))
        assert listing.json()["notifications"] == []

    @pytest.mark.asyncio
    async def test_requires_auth(self, client):
        response = await client.get("/api/v1/notifications")
        assert response.status_code == 401
