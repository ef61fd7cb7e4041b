"""
Authorization policies for moderation actions.

The resolver asks a policy object whether the acting user may moderate,
instead of trusting a flag set somewhere up the request chain. Routers inject
the default policy; tests and scripts can pass their own.
"""

from typing import Protocol

from sqlalchemy.orm import Session

from models.exceptions import InsufficientPermissionsException
from repositories.user_repository import UserRepository


class ModerationPolicy(Protocol):
    """Decides whether a user may resolve reports."""

    def ensure_can_moderate(self, db: Session, actor_id: str) -> None:
        """Raise a PermissionDeniedException if actor_id may not moderate."""
        ...


class AdminRolePolicy:
    """Only active admins may moderate."""

    def ensure_can_moderate(self, db: Session, actor_id: str) -> None:
        """
        Check the actor's admin flag.

        Raises:
            InsufficientPermissionsException: If the actor is unknown,
                inactive or not an admin.
        """
        actor = UserRepository(db).get_by_id(actor_id)
        if actor is None or not actor.is_active or not actor.is_admin:
            raise InsufficientPermissionsException("Admin privileges required")


default_policy = AdminRolePolicy()


def get_moderation_policy() -> ModerationPolicy:
    """FastAPI dependency returning the policy used by the resolve endpoint."""
    return default_policy
