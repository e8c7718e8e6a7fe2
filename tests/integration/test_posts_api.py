"""Integration tests for collab posts and applications."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from collabex.db.models import CollabApplication, OutboxEvent
from factories import headers_for, make_post, make_profile


class TestPosts:
    @pytest.mark.asyncio
    async def test_create_and_browse(self, client, db_session):
        brand = await make_profile(db_session, "Acme", account_type="brand")
        creator = await make_profile(db_session, "Casey")

        response = await client.post(
            "/api/v1/posts",
            json={"title": "Fitness reels", "description": "Two reels", "niche": "Fitness", "platforms": ["instagram"]},
            headers=headers_for(brand),
        )
        assert response.status_code == 201
        assert response.json()["status"] == "open"
        assert response.json()["author_name"] == "Acme"

        browse = await client.get("/api/v1/posts", headers=headers_for(creator))
        assert [p["title"] for p in browse.json()["posts"]] == ["Fitness reels"]

        filtered = await client.get("/api/v1/posts", params={"niche": "Tech"}, headers=headers_for(creator))
        assert filtered.json()["posts"] == []

    @pytest.mark.asyncio
    async def test_closed_posts_are_hidden(self, client, db_session):
        brand = await make_profile(db_session, "Acme")
        post = await make_post(db_session, brand)

        response = await client.patch(
            f"/api/v1/posts/{post.id}/status", json={"status": "closed"}, headers=headers_for(brand),
        )
        assert response.status_code == 200

        browse = await client.get("/api/v1/posts", headers=headers_for(brand))
        assert browse.json()["posts"] == []
        mine = await client.get("/api/v1/posts/mine", headers=headers_for(brand))
        assert len(mine.json()["posts"]) == 1

    @pytest.mark.asyncio
    async def test_only_author_changes_status(self, client, db_session):
        brand = await make_profile(db_session, "Acme")
        other = await make_profile(db_session, "Other")
        post = await make_post(db_session, brand)

        response = await client.patch(
            f"/api/v1/posts/{post.id}/status", json={"status": "closed"}, headers=headers_for(other),
        )
        assert response.status_code == 403


class TestApplications:
    @pytest.mark.asyncio
    async def test_apply_queues_interest_notification(self, client, db_session):
        brand = await make_profile(db_session, "Acme")
        creator = await make_profile(db_session, "Casey")
        post = await make_post(db_session, brand, title="Summer reels")

        response = await client.post(
            f"/api/v1/posts/{post.id}/applications", json={"message": "Pick me"}, headers=headers_for(creator),
        )
        assert response.status_code == 201
        assert response.json()["applicant_name"] == "Casey"

        result = await db_session.execute(select(OutboxEvent))
        events = result.scalars().all()
        assert len(events) == 1
        assert events[0].payload["type"] == "collab_interest"
        assert events[0].payload["title"] == "Someone's Interested!"
        assert events[0].payload["data"] == {"postId": str(post.id), "postTitle": "Summer reels"}

    @pytest.mark.asyncio
    async def test_duplicate_application_rejected(self, client, db_session):
        """A second application by the same profile is a conflict and writes nothing."""
        brand = await make_profile(db_session, "Acme")
        creator = await make_profile(db_session, "Casey")
        post = await make_post(db_session, brand)
        url = f"/api/v1/posts/{post.id}/applications"

        first = await client.post(url, headers=headers_for(creator))
        assert first.status_code == 201

        second = await client.post(url, json={"message": "again"}, headers=headers_for(creator))
        assert second.status_code == 409
        assert second.json()["detail"] == "You've already shown interest in this collaboration"

        count = await db_session.execute(select(func.count()).select_from(CollabApplication))
        assert count.scalar_one() == 1

    @pytest.mark.asyncio
    async def test_cannot_apply_to_own_post(self, client, db_session):
        brand = await make_profile(db_session, "Acme")
        post = await make_post(db_session, brand)
        response = await client.post(f"/api/v1/posts/{post.id}/applications", headers=headers_for(brand))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_cannot_apply_to_closed_post(self, client, db_session):
        brand = await make_profile(db_session, "Acme")
        creator = await make_profile(db_session, "Casey")
        post = await make_post(db_session, brand, status="closed")
        response = await client.post(f"/api/v1/posts/{post.id}/applications", headers=headers_for(creator))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_applications_visible_to_author_only(self, client, db_session):
        brand = await make_profile(db_session, "Acme")
        creator = await make_profile(db_session, "Casey")
        post = await make_post(db_session, brand)
        await client.post(f"/api/v1/posts/{post.id}/applications", headers=headers_for(creator))

        own = await client.get(f"/api/v1/posts/{post.id}/applications", headers=headers_for(brand))
        assert own.status_code == 200
        assert [a["applicant_name"] for a in own.json()["applications"]] == ["Casey"]

        other = await client.get(f"/api/v1/posts/{post.id}/applications", headers=headers_for(creator))
        assert other.status_code == 403
