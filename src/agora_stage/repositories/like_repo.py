"""Data access helpers for likes."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from agora_stage.models.like import Like

__all__ = ["LikeRepository"]


class LikeRepository:
    """Persistence for per-user likes on posts and comments."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, like: Like) -> Like:
        self.session.add(like)
        self.session.flush()
        return like

    def find_for_post(self, user_id: str, post_id: str) -> Like | None:
        stmt = select(Like).where(Like.user_id == user_id, Like.post_id == post_id)
        return self.session.execute(stmt).scalars().first()

    def find_for_comment(self, user_id: str, comment_id: str) -> Like | None:
        stmt = select(Like).where(Like.user_id == user_id, Like.comment_id == comment_id)
        return self.session.execute(stmt).scalars().first()
