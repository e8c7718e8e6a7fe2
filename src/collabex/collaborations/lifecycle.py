"""Collaboration state machine.

    pending --(recipient: accept)--> in_progress --(either: complete)--> completed
    pending --(recipient: decline | requester: withdraw)--> cancelled

completed and cancelled are terminal. ``completed_at`` is set exactly when the
status is completed.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Literal

from collabex.db.models import Collaboration
from collabex.errors import Conflict, Forbidden

Role = Literal["requester", "recipient"]

COLLAB_STATUSES = ("pending", "in_progress", "completed", "cancelled")
TERMINAL_STATUSES = frozenset({"completed", "cancelled"})

TRANSITIONS: dict[tuple[str, Role], list[str]] = {
    ("pending", "requester"): ["cancelled"],
    ("pending", "recipient"): ["in_progress", "cancelled"],
    ("in_progress", "requester"): ["completed"],
    ("in_progress", "recipient"): ["completed"],
    ("completed", "requester"): [],
    ("completed", "recipient"): [],
    ("cancelled", "requester"): [],
    ("cancelled", "recipient"): [],
}

# (status, role, target) -> UI action name
_ACTION_NAMES: dict[tuple[str, Role, str], str] = {
    ("pending", "recipient", "in_progress"): "accept",
    ("pending", "recipient", "cancelled"): "decline",
    ("pending", "requester", "cancelled"): "withdraw",
    ("in_progress", "requester", "completed"): "complete",
    ("in_progress", "recipient", "completed"): "complete",
}


def role_of(collab: Collaboration, profile_id: uuid.UUID) -> Role:
    """Raises Forbidden if ``profile_id`` is not a party to the collaboration."""
    if collab.profile_a == profile_id:
        return "requester"
    if collab.profile_b == profile_id:
        return "recipient"
    raise Forbidden("Not a party to this collaboration")


def partner_of(collab: Collaboration, profile_id: uuid.UUID) -> uuid.UUID:
    return collab.profile_b if collab.profile_a == profile_id else collab.profile_a


def allowed_transitions(status: str, role: Role) -> list[str]:
    return list(TRANSITIONS.get((status, role), []))


def validate_transition(status: str, role: Role, target: str) -> None:
    """Raises Conflict if ``role`` may not move a ``status`` collaboration to ``target``."""
    valid = allowed_transitions(status, role)
    if target not in valid:
        raise Conflict(
            f"Invalid transition: {status} -> {target} as {role}. "
            f"Valid transitions: {valid}"
        )


def apply_status(collab: Collaboration, target: str, now: datetime | None = None) -> None:
    """Write the status and keep ``completed_at`` in step with it."""
    collab.status = target
    if target == "completed":
        collab.completed_at = now or datetime.now(timezone.utc)
    else:
        collab.completed_at = None


def available_actions(collab: Collaboration, role: Role, has_reviewed: bool) -> list[str]:
    """Action names the actor may take right now, in display order."""
    actions = [_ACTION_NAMES[(collab.status, role, t)] for t in allowed_transitions(collab.status, role)]
    if collab.status == "completed" and not has_reviewed:
        actions.append("review")
    return actions
