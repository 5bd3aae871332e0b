# src/agora_stage/models/comment.py
"""SQLAlchemy model and lifecycle rules for comments and replies."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agora_stage.core.errors import ConflictError, ErrorCode, InvalidInputError
from agora_stage.db.session import Base
from agora_stage.db.time import utcnow
from agora_stage.models.content_version import CommentRef, ContentVersion
from agora_stage.services.mentions import extract_mentioned_user_ids
from agora_stage.utils.text import strip_markup


class Comment(Base):
    """Comment on a post, optionally replying to a top-level comment.

    Threads are two levels deep at most. The comment cannot see its siblings
    or its parent's ancestry, so that rule is enforced by
    ``CommentService.create_comment`` rather than here.
    """

    __tablename__ = "comment"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    post_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("post.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_account.id"), nullable=False, index=True
    )
    # NULL for top-level comments.
    parent_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("comment.id"), nullable=True, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    mentioned_user_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    helpful_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @classmethod
    def create(
        cls,
        *,
        id: str,
        post_id: str,
        author_id: str,
        content: str,
        parent_id: str | None = None,
    ) -> Comment:
        """Build a new active comment after validating its content."""
        _validate_content(content)
        now = utcnow()
        return cls(
            id=id,
            post_id=post_id,
            author_id=author_id,
            parent_id=parent_id,
            content=content,
            mentioned_user_ids=extract_mentioned_user_ids(content),
            like_count=0,
            helpful_count=0,
            created_at=now,
            updated_at=now,
            deleted_at=None,
        )

    @property
    def is_archived(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None

    @property
    def ref(self) -> CommentRef:
        return CommentRef(self.id)

    def update(self, content: str) -> bool:
        """Replace the comment body; returns True if it actually changed."""
        self._ensure_not_archived()
        _validate_content(content)

        changed = content != self.content
        self.content = content
        self.mentioned_user_ids = extract_mentioned_user_ids(content)
        self.updated_at = utcnow()
        return changed

    def archive(self) -> None:
        if self.is_archived:
            raise ConflictError(ErrorCode.COMMENT_ALREADY_ARCHIVED, "Comment is already archived")
        self.deleted_at = utcnow()

    def restore(self) -> None:
        if not self.is_archived:
            raise ConflictError(ErrorCode.COMMENT_NOT_ARCHIVED, "Comment is not archived")
        self.deleted_at = None
        self.updated_at = utcnow()

    def increment_like_count(self) -> None:
        self.like_count += 1
        self.updated_at = utcnow()

    def increment_helpful_count(self) -> None:
        self.helpful_count += 1
        self.updated_at = utcnow()

    def create_version_snapshot(self, version_number: int, *, version_id: str) -> ContentVersion:
        """Capture the current content as version ``version_number``."""
        return ContentVersion.create(
            id=version_id,
            ref=self.ref,
            content=self.content,
            version_number=version_number,
        )

    def _ensure_not_archived(self) -> None:
        if self.is_archived:
            raise ConflictError(
                ErrorCode.CANNOT_MODIFY_ARCHIVED_COMMENT, "Cannot modify archived comment"
            )


def _validate_content(content: str) -> None:
    if not content or not content.strip():
        raise InvalidInputError(ErrorCode.INVALID_CONTENT, "Comment content is required")
    if len(strip_markup(content)) < 1:
        raise InvalidInputError(
            ErrorCode.CONTENT_TOO_SHORT, "Comment content must be at least 1 character"
        )
