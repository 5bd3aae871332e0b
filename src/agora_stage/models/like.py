# src/agora_stage/models/like.py
"""SQLAlchemy model recording which user liked which post or comment."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from agora_stage.core.errors import ErrorCode, InvalidInputError
from agora_stage.db.session import Base
from agora_stage.db.time import utcnow


class Like(Base):
    """A single user's like on exactly one post or one comment.

    Likes are never removed, so the like counters on posts and comments only
    grow. The unique constraints allow one like per user and target.
    """

    __tablename__ = "content_like"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_like_user_post"),
        UniqueConstraint("user_id", "comment_id", name="uq_like_user_comment"),
        CheckConstraint(
            "(post_id IS NULL) <> (comment_id IS NULL)",
            name="ck_like_single_target",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_account.id"), nullable=False, index=True
    )
    post_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("post.id", ondelete="CASCADE"), nullable=True
    )
    comment_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("comment.id", ondelete="CASCADE"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    @classmethod
    def for_post(cls, *, id: str, user_id: str, post_id: str) -> Like:
        if not post_id or not post_id.strip():
            raise InvalidInputError(
                ErrorCode.INVALID_INPUT, "Post ID is required when liking a post"
            )
        return cls._build(id=id, user_id=user_id, post_id=post_id, comment_id=None)

    @classmethod
    def for_comment(cls, *, id: str, user_id: str, comment_id: str) -> Like:
        if not comment_id or not comment_id.strip():
            raise InvalidInputError(
                ErrorCode.INVALID_INPUT, "Comment ID is required when liking a comment"
            )
        return cls._build(id=id, user_id=user_id, post_id=None, comment_id=comment_id)

    @classmethod
    def _build(
        cls, *, id: str, user_id: str, post_id: str | None, comment_id: str | None
    ) -> Like:
        if not user_id or not user_id.strip():
            raise InvalidInputError(ErrorCode.INVALID_INPUT, "User ID is required")
        return cls(
            id=id,
            user_id=user_id,
            post_id=post_id,
            comment_id=comment_id,
            created_at=utcnow(),
        )

    @property
    def is_post_like(self) -> bool:
        return self.post_id is not None

    def __repr__(self) -> str:
        target = f"post={self.post_id}" if self.is_post_like else f"comment={self.comment_id}"
        return f"<Like {self.id} user={self.user_id} {target}>"
