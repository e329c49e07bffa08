"""Ownership rule shared by every edit and delete route."""

from campus_pulse.core.errors import PermissionDeniedError
from campus_pulse.schemas.auth import CurrentUser


def can_modify(user: CurrentUser, owner_id: int) -> bool:
    return user.is_admin or user.id == owner_id


def ensure_can_modify(user: CurrentUser, owner_id: int) -> None:
    """Raise PermissionDeniedError unless user is an admin or owns the row."""
    if not can_modify(user, owner_id):
        raise PermissionDeniedError("Unauthorized")
