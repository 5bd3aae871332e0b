"""Data access helpers for working with comments."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from agora_stage.models.comment import Comment

__all__ = ["CommentRepository"]


class CommentRepository:
    """Thin wrapper around database access for comment entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, comment_id: str, *, include_archived: bool = False) -> Comment | None:
        """Return a comment by identifier, hiding archived comments unless asked."""
        stmt = select(Comment).where(Comment.id == comment_id)
        if not include_archived:
            stmt = stmt.where(Comment.deleted_at.is_(None))
        return self.session.execute(stmt).scalars().first()

    def list_for_post(self, post_id: str) -> list[Comment]:
        """Return active comments on a post, oldest first."""
        stmt = (
            select(Comment)
            .where(Comment.post_id == post_id, Comment.deleted_at.is_(None))
            .order_by(Comment.created_at, Comment.id)
        )
        return list(self.session.execute(stmt).scalars())

    def create(self, comment: Comment) -> Comment:
        self.session.add(comment)
        self.session.flush()
        return comment

    def update(self, comment: Comment) -> Comment:
        self.session.add(comment)
        self.session.flush()
        return comment
