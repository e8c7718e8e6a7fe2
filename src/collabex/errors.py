"""Domain error taxonomy.

Services raise these; the global handlers in ``collabex.middleware.error_handler``
turn them into JSON responses with the matching status code.
"""

from __future__ import annotations


class CollabExError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailed(CollabExError):
    """Malformed or out-of-range input."""

    status_code = 400


class Unauthorized(CollabExError):
    """Missing or invalid credential."""

    status_code = 401


class Forbidden(CollabExError):
    """Caller is authenticated but lacks the identity or relationship required."""

    status_code = 403


class NotFound(CollabExError):
    """Referenced row does not exist."""

    status_code = 404


class Conflict(CollabExError):
    """Request conflicts with current state (duplicates, illegal transitions)."""

    status_code = 409
