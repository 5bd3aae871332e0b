"""Data access helpers for working with posts."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from agora_stage.models.post import Post

__all__ = ["PostRepository"]


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: str, *, include_archived: bool = False) -> Post | None:
        """Return a post by identifier, hiding archived posts unless asked."""
        stmt = select(Post).where(Post.id == post_id)
        if not include_archived:
            stmt = stmt.where(Post.deleted_at.is_(None))
        return self.session.execute(stmt).scalars().first()

    def list_for_community(
        self,
        community_id: str,
        *,
        include_drafts: bool = False,
        limit: int | None = None,
    ) -> list[Post]:
        """Return active posts in a community, pinned first then newest first."""
        stmt = select(Post).where(
            Post.community_id == community_id,
            Post.deleted_at.is_(None),
        )
        if not include_drafts:
            stmt = stmt.where(Post.published_at.is_not(None))
        stmt = stmt.order_by(Post.is_pinned.desc(), Post.created_at.desc(), Post.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars())

    def create(self, post: Post) -> Post:
        """Insert a new post and return the persisted ORM instance."""
        self.session.add(post)
        self.session.flush()
        return post

    def update(self, post: Post) -> Post:
        """Flush pending changes on an already-tracked post."""
        self.session.add(post)
        self.session.flush()
        return post
