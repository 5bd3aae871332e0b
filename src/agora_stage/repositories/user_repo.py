"""Lookup of users referenced by content and notifications."""
from __future__ import annotations

from sqlalchemy.orm import Session

from agora_stage.models.user import User

__all__ = ["UserRepository"]


class UserRepository:
    """Read-only access to user accounts."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, user_id: str) -> User | None:
        """Return the user with ``user_id`` or None."""
        return self.session.get(User, user_id)
