"""Per-request identity context threaded explicitly through services."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from collabex.db.models import Profile
from collabex.errors import Forbidden


@dataclass(frozen=True)
class Identity:
    """Verified caller identity from the bearer token."""

    user_id: uuid.UUID
    email: str | None = None


@dataclass(frozen=True)
class RequestContext:
    """Identity plus the caller's resolved profile, if one exists yet."""

    identity: Identity
    profile: Profile | None = None

    @property
    def user_id(self) -> uuid.UUID:
        return self.identity.user_id

    @property
    def profile_id(self) -> uuid.UUID:
        return self.require_profile().id

    def require_profile(self) -> Profile:
        """Return the caller's profile or raise Forbidden."""
        if self.profile is None:
            raise Forbidden("Profile not found")
        return self.profile
