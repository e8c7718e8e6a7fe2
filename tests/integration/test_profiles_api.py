"""Integration tests for profiles, niches, payment preferences, and social platforms."""

from __future__ import annotations

import uuid

import pytest

from collabex.db.models import SocialPlatform
from factories import auth_headers, headers_for, make_platform, make_profile


class TestProfileSignup:
    @pytest.mark.asyncio
    async def test_create_profile_takes_email_from_token(self, client, db_session):
        user_id = uuid.uuid4()
        headers = auth_headers(user_id, "new@example.com")

        response = await client.post(
            "/api/v1/profiles", json={"account_type": "brand", "display_name": " Acme "}, headers=headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["user_id"] == str(user_id)
        assert body["display_name"] == "Acme"
        assert body["account_type"] == "brand"
        assert body["onboarding_completed"] is False

        me = await client.get("/api/v1/profiles/me", headers=headers)
        assert me.json()["id"] == body["id"]

    @pytest.mark.asyncio
    async def test_second_profile_conflicts(self, client, db_session):
        alice = await make_profile(db_session, "Alice")
        response = await client.post("/api/v1/profiles", json={}, headers=headers_for(alice))
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_me_without_profile(self, client, db_session):
        response = await client.get("/api/v1/profiles/me", headers=auth_headers(uuid.uuid4()))
        assert response.status_code == 403


class TestProfileUpdates:
    @pytest.mark.asyncio
    async def test_onboarding_update_with_niches(self, client, db_session):
        alice = await make_profile(db_session, "Alice", onboarding_completed=False)

        response = await client.patch(
            "/api/v1/profiles/me",
            json={
                "bio": "Runner",
                "audience_tier": "micro",
                "onboarding_completed": True,
                "niches": ["Fitness", "Travel", "Fitness"],
            },
            headers=headers_for(alice),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["bio"] == "Runner"
        assert body["audience_tier"] == "micro"
        assert body["onboarding_completed"] is True
        assert body["niches"] == ["Fitness", "Travel"]

        # Replacing keeps surviving niches and drops the rest
        response = await client.patch(
            "/api/v1/profiles/me", json={"niches": ["Travel", "Food"]}, headers=headers_for(alice),
        )
        assert response.json()["niches"] == ["Food", "Travel"]

    @pytest.mark.asyncio
    async def test_unknown_niche_rejected(self, client, db_session):
        alice = await make_profile(db_session, "Alice")
        response = await client.patch(
            "/api/v1/profiles/me", json={"niches": ["Basket Weaving"]}, headers=headers_for(alice),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_payment_preferences_merge(self, client, db_session):
        alice = await make_profile(db_session, "Alice")

        await client.put(
            "/api/v1/profiles/me/payment",
            json={"base_rate": 250, "rate_type": "per_post", "currency": "USD"},
            headers=headers_for(alice),
        )
        response = await client.put(
            "/api/v1/profiles/me/payment", json={"open_to_free_collabs": True}, headers=headers_for(alice),
        )

        assert response.json()["payment_preferences"] == {
            "base_rate": 250.0,
            "rate_type": "per_post",
            "currency": "USD",
            "open_to_free_collabs": True,
        }

    @pytest.mark.asyncio
    async def test_public_profile(self, client, db_session):
        alice = await make_profile(db_session, "Alice")
        bob = await make_profile(db_session, "Bob")
        await make_platform(db_session, bob, handle="bob")

        response = await client.get(f"/api/v1/profiles/{bob.id}", headers=headers_for(alice))

        assert response.status_code == 200
        body = response.json()
        assert body["display_name"] == "Bob"
        assert "payment_preferences" not in body
        assert [p["handle"] for p in body["platforms"]] == ["bob"]


class TestSocialPlatforms:
    @pytest.mark.asyncio
    async def test_add_and_list(self, client, db_session):
        alice = await make_profile(db_session, "Alice")

        response = await client.post(
            "/api/v1/profiles/me/platforms",
            json={"platform_name": "Instagram", "handle": "alice", "url": "https://instagram.com/alice"},
            headers=headers_for(alice),
        )
        assert response.status_code == 201
        assert response.json()["is_verified"] is False

        listing = await client.get("/api/v1/profiles/me/platforms", headers=headers_for(alice))
        assert [p["platform_name"] for p in listing.json()["platforms"]] == ["Instagram"]

    @pytest.mark.asyncio
    async def test_changing_handle_clears_verification(self, client, db_session):
        alice = await make_profile(db_session, "Alice")
        platform = await make_platform(db_session, alice, handle="jane_doe")
        verify = await client.post(
            "/api/v1/functions/verify-social-platform",
            json={
                "platformId": str(platform.id),
                "platformName": "instagram",
                "handle": "jane_doe",
                "url": "https://instagram.com/jane_doe",
            },
            headers=headers_for(alice),
        )
        assert verify.json()["verified"] is True

        # Follower count alone keeps the badge
        response = await client.patch(
            f"/api/v1/profiles/me/platforms/{platform.id}", json={"follower_count": 1200}, headers=headers_for(alice),
        )
        assert response.json()["is_verified"] is True

        response = await client.patch(
            f"/api/v1/profiles/me/platforms/{platform.id}", json={"handle": "someone_else"}, headers=headers_for(alice),
        )
        assert response.json()["is_verified"] is False
        assert response.json()["verified_at"] is None

    @pytest.mark.asyncio
    async def test_cannot_edit_others_platform(self, client, db_session):
        alice = await make_profile(db_session, "Alice")
        mallory = await make_profile(db_session, "Mallory")
        platform = await make_platform(db_session, alice)

        response = await client.patch(
            f"/api/v1/profiles/me/platforms/{platform.id}", json={"handle": "stolen"}, headers=headers_for(mallory),
        )
        assert response.status_code == 403
        assert (await client.delete(
            f"/api/v1/profiles/me/platforms/{platform.id}", headers=headers_for(mallory),
        )).status_code == 403

    @pytest.mark.asyncio
    async def test_delete(self, client, db_session):
        alice = await make_profile(db_session, "Alice")
        platform = await make_platform(db_session, alice)

        response = await client.delete(f"/api/v1/profiles/me/platforms/{platform.id}", headers=headers_for(alice))

        assert response.status_code == 200
        db_session.expunge(platform)
        assert await db_session.get(SocialPlatform, platform.id) is None

    @pytest.mark.asyncio
    async def test_unknown_platform(self, client, db_session):
        alice = await make_profile(db_session, "Alice")
        response = await client.delete(f"/api/v1/profiles/me/platforms/{uuid.uuid4()}", headers=headers_for(alice))
        assert response.status_code == 404
