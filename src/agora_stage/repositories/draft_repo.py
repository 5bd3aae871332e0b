"""Data access helpers for autosaved post drafts."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from agora_stage.models.post_draft import PostDraft

__all__ = ["PostDraftRepository"]


class PostDraftRepository:
    """Persistence for post drafts, one per user and post (or new post)."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_for_user(self, user_id: str, post_id: str | None) -> PostDraft | None:
        """Return the user's draft for ``post_id``, or for a new post when None."""
        stmt = select(PostDraft).where(PostDraft.user_id == user_id)
        if post_id is None:
            stmt = stmt.where(PostDraft.post_id.is_(None))
        else:
            stmt = stmt.where(PostDraft.post_id == post_id)
        return self.session.execute(stmt).scalars().first()

    def create(self, draft: PostDraft) -> PostDraft:
        self.session.add(draft)
        self.session.flush()
        return draft

    def update(self, draft: PostDraft) -> PostDraft:
        self.session.add(draft)
        self.session.flush()
        return draft

    def delete_expired(self, now: datetime) -> int:
        """Delete every draft whose expiry is before ``now``; returns the count."""
        result = self.session.execute(
            delete(PostDraft)
            .where(PostDraft.expires_at < now)
            .execution_options(synchronize_session="fetch")
        )
        self.session.flush()
        return result.rowcount or 0
