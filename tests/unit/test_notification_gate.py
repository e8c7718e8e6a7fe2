"""Relationship gate for notifications."""

from __future__ import annotations

import pytest

from collabex.notifications.gate import can_notify, has_applied_to_author, has_collaboration, has_match
from factories import make_application, make_collaboration, make_match, make_post, make_profile


class TestCanNotify:
    @pytest.mark.asyncio
    async def test_strangers_are_denied(self, db_session):
        """No match, collaboration, or application: denied for every type."""
        alice = await make_profile(db_session, "Alice")
        bob = await make_profile(db_session, "Bob")
        for type_ in ("collab_request", "collab_accepted", "collab_completed", "collab_interest"):
            assert await can_notify(db_session, alice.id, bob.id, type_) is False

    @pytest.mark.asyncio
    async def test_match_allows_either_direction(self, db_session):
        alice = await make_profile(db_session, "Alice")
        bob = await make_profile(db_session, "Bob")
        await make_match(db_session, alice, bob)
        assert await has_match(db_session, bob.id, alice.id)
        assert await can_notify(db_session, alice.id, bob.id, "collab_request")
        assert await can_notify(db_session, bob.id, alice.id, "collab_request")

    @pytest.mark.asyncio
    async def test_collaboration_in_any_status(self, db_session):
        alice = await make_profile(db_session, "Alice")
        bob = await make_profile(db_session, "Bob")
        await make_collaboration(db_session, alice, bob, status="cancelled")
        assert await has_collaboration(db_session, bob.id, alice.id)
        assert await can_notify(db_session, bob.id, alice.id, "collab_completed")

    @pytest.mark.asyncio
    async def test_application_allows_applicant_to_author_only(self, db_session):
        author = await make_profile(db_session, "Author")
        applicant = await make_profile(db_session, "Applicant")
        post = await make_post(db_session, author)
        await make_application(db_session, post, applicant)

        assert await has_applied_to_author(db_session, applicant.id, author.id)
        assert await can_notify(db_session, applicant.id, author.id, "collab_request")
        assert await can_notify(db_session, author.id, applicant.id, "collab_request") is False

    @pytest.mark.asyncio
    async def test_interest_needs_only_a_post_by_recipient(self, db_session):
        """collab_interest is allowed toward anyone who has published a post."""
        author = await make_profile(db_session, "Author")
        reader = await make_profile(db_session, "Reader")
        await make_post(db_session, author)

        assert await can_notify(db_session, reader.id, author.id, "collab_interest")
        assert await can_notify(db_session, reader.id, author.id, "collab_request") is False
        assert await can_notify(db_session, author.id, reader.id, "collab_interest") is False
