"""Initial CollabEx schema.

Creates profiles, profile_niches, social_platforms, swipe_actions, matches,
collaborations, collab_posts, collab_applications, reviews, messages,
notifications, and outbox_events.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def _profile_fk(name: str) -> sa.Column:
    return sa.Column(name, sa.Uuid(), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)


def upgrade() -> None:
    """Create all tables."""
    # --- Profiles ---
    op.create_table(
        "profiles",
        _id(),
        sa.Column("user_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("display_name", sa.String(100), server_default="", nullable=False),
        sa.Column("bio", sa.String(1000), nullable=True),
        sa.Column("location", sa.String(100), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("banner_url", sa.Text(), nullable=True),
        sa.Column("account_type", sa.String(16), server_default="influencer", nullable=False),
        sa.Column("audience_tier", sa.String(32), nullable=True),
        sa.Column("onboarding_completed", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("payment_preferences", JSON, server_default="{}", nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("account_type IN ('influencer', 'brand')", name="ck_profiles_account_type"),
        sa.CheckConstraint(
            "audience_tier IN ('nano', 'micro', 'mid', 'macro', 'mega')", name="ck_profiles_audience_tier",
        ),
    )

    op.create_table(
        "profile_niches",
        _id(),
        _profile_fk("profile_id"),
        sa.Column("niche", sa.String(64), nullable=False),
        _created_at(),
        sa.UniqueConstraint("profile_id", "niche", name="uq_profile_niche"),
    )

    op.create_table(
        "social_platforms",
        _id(),
        _profile_fk("profile_id"),
        sa.Column("platform_name", sa.String(50), nullable=False),
        sa.Column("handle", sa.String(100), server_default="", nullable=False),
        sa.Column("url", sa.String(500), nullable=True),
        sa.Column("follower_count", sa.Integer(), nullable=True),
        sa.Column("is_verified", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_social_platforms_profile_id", "social_platforms", ["profile_id"])

    # --- Matching ---
    op.create_table(
        "swipe_actions",
        _id(),
        _profile_fk("swiper_id"),
        _profile_fk("swiped_id"),
        sa.Column("direction", sa.String(8), nullable=False),
        _created_at(),
        sa.CheckConstraint("direction IN ('left', 'right')", name="ck_swipe_actions_direction"),
    )
    op.create_index("ix_swipe_actions_swiper", "swipe_actions", ["swiper_id"])

    op.create_table(
        "matches",
        _id(),
        _profile_fk("profile_a"),
        _profile_fk("profile_b"),
        _created_at(),
    )

    # --- Collaborations ---
    op.create_table(
        "collaborations",
        _id(),
        _profile_fk("profile_a"),
        _profile_fk("profile_b"),
        sa.Column("title", sa.String(200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), server_default="pending", nullable=False),
        _created_at(),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed', 'cancelled')", name="ck_collaborations_status",
        ),
        sa.CheckConstraint("(status = 'completed') = (completed_at IS NOT NULL)", name="ck_collaborations_completed_at"),
    )

    op.create_table(
        "collab_posts",
        _id(),
        _profile_fk("author_id"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column("requirements", sa.Text(), nullable=True),
        sa.Column("niche", sa.String(64), nullable=True),
        sa.Column("platforms", JSON, nullable=True),
        sa.Column("deadline", sa.Date(), nullable=True),
        sa.Column("status", sa.String(16), server_default="open", nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("status IN ('open', 'in_progress', 'closed')", name="ck_collab_posts_status"),
    )
    op.create_index("ix_collab_posts_author_id", "collab_posts", ["author_id"])

    op.create_table(
        "collab_applications",
        _id(),
        sa.Column("post_id", sa.Uuid(), sa.ForeignKey("collab_posts.id", ondelete="CASCADE"), nullable=False),
        _profile_fk("applicant_id"),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), server_default="pending", nullable=False),
        _created_at(),
        sa.UniqueConstraint("post_id", "applicant_id", name="uq_application_post_applicant"),
    )

    op.create_table(
        "reviews",
        _id(),
        _profile_fk("reviewer_id"),
        _profile_fk("reviewee_id"),
        sa.Column(
            "collaboration_id", sa.Uuid(), sa.ForeignKey("collaborations.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("rating", sa.SmallInteger(), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        _created_at(),
        sa.UniqueConstraint("reviewer_id", "reviewee_id", name="uq_review_reviewer_reviewee"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating"),
    )

    # --- Messaging & notifications ---
    op.create_table(
        "messages",
        _id(),
        _profile_fk("sender_id"),
        _profile_fk("receiver_id"),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("read", sa.Boolean(), server_default=sa.false(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_messages_pair", "messages", ["sender_id", "receiver_id"])

    op.create_table(
        "notifications",
        _id(),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("data", JSON, server_default="{}", nullable=False),
        sa.Column("read", sa.Boolean(), server_default=sa.false(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_notifications_user_created", "notifications", ["user_id", "created_at"])

    op.create_table(
        "outbox_events",
        _id(),
        sa.Column("kind", sa.String(32), nullable=False),
        sa.Column("payload", JSON, server_default="{}", nullable=False),
        sa.Column("status", sa.String(16), server_default="pending", nullable=False),
        sa.Column("attempts", sa.Integer(), server_default="0", nullable=False),
        sa.Column("next_attempt_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("last_error", sa.Text(), nullable=True),
        _created_at(),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('pending', 'done', 'failed')", name="ck_outbox_events_status"),
    )
    op.create_index("ix_outbox_events_due", "outbox_events", ["status", "next_attempt_at"])


def downgrade() -> None:
    """Drop all tables."""
    for table in (
        "outbox_events",
        "notifications",
        "messages",
        "reviews",
        "collab_applications",
        "collab_posts",
        "collaborations",
        "matches",
        "swipe_actions",
        "social_platforms",
        "profile_niches",
        "profiles",
    ):
        op.drop_table(table)
