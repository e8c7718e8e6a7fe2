"""Integration tests for the send-notification function."""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from collabex.db.models import Notification, OutboxEvent
from collabex.functions import GENERIC_ERROR
from collabex.notifications.schemas import FIELD_MESSAGES
from factories import auth_headers, headers_for, make_match, make_post, make_profile

URL = "/api/v1/functions/send-notification"


def _body(recipient_user_id, **overrides) -> dict:
    body = {
        "recipientUserId": str(recipient_user_id),
        "type": "collab_request",
        "title": "New Collaboration Request",
        "message": "Want to team up?",
        "senderName": "Alice",
    }
    body.update(overrides)
    return body


async def _notifications(db) -> list[Notification]:
    result = await db.execute(select(Notification))
    return list(result.scalars().all())


async def _outbox(db) -> list[OutboxEvent]:
    result = await db.execute(select(OutboxEvent))
    return list(result.scalars().all())


class TestSendNotificationAuth:
    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        """No header: 401 before the body is even looked at."""
        response = await client.post(URL, content="not json")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized - missing authorization header"}

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        response = await client.post(URL, json=_body(uuid.uuid4()), headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized - invalid token"}


class TestSendNotificationValidation:
    @pytest.mark.asyncio
    async def test_non_uuid_recipient(self, client, db_session):
        response = await client.post(URL, json=_body("abc"), headers=auth_headers(uuid.uuid4()))
        assert response.status_code == 400
        assert response.json() == {"error": FIELD_MESSAGES["recipientUserId"]}

    @pytest.mark.asyncio
    async def test_unknown_type(self, client):
        response = await client.post(
            URL, json=_body(uuid.uuid4(), type="party_invite"), headers=auth_headers(uuid.uuid4()),
        )
        assert response.status_code == 400
        assert response.json() == {"error": FIELD_MESSAGES["type"]}

    @pytest.mark.asyncio
    async def test_title_too_long(self, client):
        response = await client.post(
            URL, json=_body(uuid.uuid4(), title="x" * 201), headers=auth_headers(uuid.uuid4()),
        )
        assert response.status_code == 400
        assert response.json() == {"error": FIELD_MESSAGES["title"]}

    @pytest.mark.asyncio
    async def test_malformed_json(self, client):
        response = await client.post(
            URL,
            content="{not json",
            headers={**auth_headers(uuid.uuid4()), "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}

    @pytest.mark.asyncio
    async def test_payload_mismatch(self, client):
        response = await client.post(
            URL,
            json=_body(uuid.uuid4(), type="collab_interest", data={"postTitle": "missing id"}),
            headers=auth_headers(uuid.uuid4()),
        )
        assert response.status_code == 400
        assert response.json() == {"error": FIELD_MESSAGES["data"]}


class TestSendNotificationDispatch:
    @pytest.mark.asyncio
    async def test_sender_without_profile(self, client, db_session):
        bob = await make_profile(db_session, "Bob")
        response = await client.post(URL, json=_body(bob.user_id), headers=auth_headers(uuid.uuid4()))
        assert response.status_code == 403
        assert response.json() == {"error": "Sender profile not found"}

    @pytest.mark.asyncio
    async def test_unknown_recipient(self, client, db_session):
        alice = await make_profile(db_session, "Alice")
        response = await client.post(URL, json=_body(uuid.uuid4()), headers=headers_for(alice))
        assert response.status_code == 404
        assert response.json() == {"error": "Recipient not found"}

    @pytest.mark.asyncio
    async def test_no_relationship(self, client, db_session):
        """Strangers cannot notify each other, and nothing is written."""
        alice = await make_profile(db_session, "Alice")
        bob = await make_profile(db_session, "Bob", email="bob@example.com")

        response = await client.post(URL, json=_body(bob.user_id), headers=headers_for(alice))

        assert response.status_code == 403
        assert response.json() == {"error": "Unauthorized - no relationship with recipient"}
        assert await _notifications(db_session) == []
        assert await _outbox(db_session) == []

    @pytest.mark.asyncio
    async def test_matched_sender_creates_notification_and_email(self, client, db_session):
        alice = await make_profile(db_session, "Alice")
        bob = await make_profile(db_session, "Bob", email="bob@example.com")
        await make_match(db_session, alice, bob)

        response = await client.post(
            URL,
            json=_body(bob.user_id, title="<b>Hi</b>", data={"collaborationTitle": "Launch"}),
            headers=headers_for(alice),
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Notification sent"}

        notifications = await _notifications(db_session)
        assert len(notifications) == 1
        notification = notifications[0]
        assert notification.user_id == bob.user_id
        assert notification.type == "collab_request"
        assert notification.title == "&lt;b&gt;Hi&lt;/b&gt;"
        assert notification.read is False
        assert notification.data == {"collaborationTitle": "Launch"}

        events = await _outbox(db_session)
        assert [e.kind for e in events] == ["email"]
        assert events[0].payload["to"] == "bob@example.com"
        assert events[0].payload["sender_name"] == "Alice"

    @pytest.mark.asyncio
    async def test_recipient_without_email_gets_inbox_row_only(self, client, db_session):
        alice = await make_profile(db_session, "Alice")
        bob = await make_profile(db_session, "Bob", email=None)
        await make_match(db_session, alice, bob)

        response = await client.post(URL, json=_body(bob.user_id), headers=headers_for(alice))

        assert response.status_code == 200
        assert len(await _notifications(db_session)) == 1
        assert await _outbox(db_session) == []

    @pytest.mark.asyncio
    async def test_interest_toward_post_author(self, client, db_session):
        """collab_interest only needs the recipient to have published a post."""
        author = await make_profile(db_session, "Author")
        reader = await make_profile(db_session, "Reader")
        post = await make_post(db_session, author)

        response = await client.post(
            URL,
            json=_body(
                author.user_id,
                type="collab_interest",
                data={"postId": str(post.id), "postTitle": post.title},
            ),
            headers=headers_for(reader),
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_longest_title_survives_escaping(self, client, db_session):
        """A 200-character title of HTML specials is stored escaped in full."""
        alice = await make_profile(db_session, "Alice")
        bob = await make_profile(db_session, "Bob")
        await make_match(db_session, alice, bob)
        title = "&'" * 100

        response = await client.post(URL, json=_body(bob.user_id, title=title), headers=headers_for(alice))

        assert response.status_code == 200
        (notification,) = await _notifications(db_session)
        assert notification.title == "&amp;&#x27;" * 100
        assert len(notification.title) == 1100

    @pytest.mark.asyncio
    async def test_gate_query_failure_fails_closed(self, client, db_session, monkeypatch):
        alice = await make_profile(db_session, "Alice")
        bob = await make_profile(db_session, "Bob", email="bob@example.com")
        await make_match(db_session, alice, bob)
        monkeypatch.setattr(
            "collabex.notifications.dispatch.can_notify",
            AsyncMock(side_effect=SQLAlchemyError("connection reset")),
        )

        response = await client.post(URL, json=_body(bob.user_id), headers=headers_for(alice))

        assert response.status_code == 500
        assert response.json() == {"error": GENERIC_ERROR}
        assert "connection reset" not in response.text
        assert await _notifications(db_session) == []
        assert await _outbox(db_session) == []
