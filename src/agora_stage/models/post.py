# src/agora_stage/models/post.py
"""SQLAlchemy model and lifecycle rules for forum posts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agora_stage.core.errors import ConflictError, ErrorCode, InvalidInputError
from agora_stage.db.session import Base
from agora_stage.db.time import utcnow
from agora_stage.models.content_version import ContentVersion, PostRef
from agora_stage.services.mentions import extract_mentioned_user_ids
from agora_stage.utils.text import strip_markup

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200
CONTENT_MIN_LENGTH = 10


class Post(Base):
    """Primary content entity produced by community members.

    Posts start as drafts (``published_at`` is NULL) and active (``deleted_at``
    is NULL). Publication is one-way; archival is undone with ``restore()``.
    Archived posts reject every mutation except ``restore()`` and the
    engagement counters.
    """

    __tablename__ = "post"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    community_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("community.id"), nullable=False, index=True
    )
    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_account.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    # Rich text (HTML).
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # Derived from content on every write; never authoritative.
    mentioned_user_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    is_pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_solved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    helpful_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )

    @classmethod
    def create(
        cls,
        *,
        id: str,
        community_id: str,
        author_id: str,
        title: str,
        content: str,
    ) -> Post:
        """Build a new draft post after validating title and content.

        Raises:
            InvalidInputError: If the title or content fails validation.
        """
        _validate_title(title)
        _validate_content(content)
        now = utcnow()
        return cls(
            id=id,
            community_id=community_id,
            author_id=author_id,
            title=title.strip(),
            content=content,
            mentioned_user_ids=extract_mentioned_user_ids(content),
            is_pinned=False,
            is_solved=False,
            like_count=0,
            helpful_count=0,
            comment_count=0,
            view_count=0,
            created_at=now,
            updated_at=now,
            published_at=None,
            deleted_at=None,
        )

    @property
    def is_archived(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_draft(self) -> bool:
        return self.published_at is None

    @property
    def is_published(self) -> bool:
        return self.published_at is not None

    @property
    def ref(self) -> PostRef:
        return PostRef(self.id)

    def update(self, *, title: str | None = None, content: str | None = None) -> bool:
        """Replace the title and/or content.

        Both supplied fields are validated before either is applied, so a
        failure leaves the post untouched.

        Returns:
            True if the content changed (callers snapshot a new version).

        Raises:
            ConflictError: If the post is archived.
            InvalidInputError: If a supplied field fails validation.
        """
        self._ensure_not_archived()
        if title is not None:
            _validate_title(title)
        if content is not None:
            _validate_content(content)

        content_changed = content is not None and content != self.content
        if title is not None:
            self.title = title.strip()
        if content is not None:
            self.content = content
            self.mentioned_user_ids = extract_mentioned_user_ids(content)
        self.updated_at = utcnow()
        return content_changed

    def publish(self) -> None:
        """Make the post visible to community members."""
        self._ensure_not_archived()
        if self.is_published:
            raise ConflictError(ErrorCode.POST_ALREADY_PUBLISHED, "Post is already published")

        # Final gate: persisted rows may predate current rules.
        _validate_title(self.title)
        _validate_content(self.content)

        now = utcnow()
        self.published_at = now
        self.updated_at = now

    def archive(self) -> None:
        """Soft delete the post."""
        if self.is_archived:
            raise ConflictError(ErrorCode.POST_ALREADY_ARCHIVED, "Post is already archived")
        self.deleted_at = utcnow()

    def restore(self) -> None:
        """Bring an archived post back to the active state."""
        if not self.is_archived:
            raise ConflictError(ErrorCode.POST_NOT_ARCHIVED, "Post is not archived")
        self.deleted_at = None
        self.updated_at = utcnow()

    def pin(self) -> None:
        self._ensure_not_archived()
        self._ensure_published()
        if self.is_pinned:
            raise ConflictError(ErrorCode.POST_ALREADY_PINNED, "Post is already pinned")
        self.is_pinned = True
        self.updated_at = utcnow()

    def unpin(self) -> None:
        self._ensure_not_archived()
        if not self.is_pinned:
            raise ConflictError(ErrorCode.POST_NOT_PINNED, "Post is not pinned")
        self.is_pinned = False
        self.updated_at = utcnow()

    def mark_solved(self) -> None:
        self._ensure_not_archived()
        self._ensure_published()
        if self.is_solved:
            raise ConflictError(ErrorCode.POST_ALREADY_SOLVED, "Post is already marked as solved")
        self.is_solved = True
        self.updated_at = utcnow()

    def mark_unsolved(self) -> None:
        self._ensure_not_archived()
        if not self.is_solved:
            raise ConflictError(ErrorCode.POST_NOT_SOLVED, "Post is not marked as solved")
        self.is_solved = False
        self.updated_at = utcnow()

    # Engagement counters. Only comment_count may go down, and never below zero.

    def increment_like_count(self) -> None:
        self.like_count += 1
        self.updated_at = utcnow()

    def increment_helpful_count(self) -> None:
        self.helpful_count += 1
        self.updated_at = utcnow()

    def increment_comment_count(self) -> None:
        self.comment_count += 1
        self.updated_at = utcnow()

    def decrement_comment_count(self) -> None:
        if self.comment_count > 0:
            self.comment_count -= 1
            self.updated_at = utcnow()

    def increment_view_count(self) -> None:
        self.view_count += 1

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
            raise ConflictError(ErrorCode.CANNOT_MODIFY_ARCHIVED_POST, "Cannot modify archived post")

    def _ensure_published(self) -> None:
        if self.is_draft:
            raise ConflictError(
                ErrorCode.POST_NOT_PUBLISHED,
                "Cannot perform this action on unpublished post",
            )


def _validate_title(title: str) -> None:
    if not title or not title.strip():
        raise InvalidInputError(ErrorCode.INVALID_TITLE, "Post title is required")
    trimmed = title.strip()
    if len(trimmed) < TITLE_MIN_LENGTH:
        raise InvalidInputError(
            ErrorCode.TITLE_TOO_SHORT,
            f"Post title must be at least {TITLE_MIN_LENGTH} characters",
        )
    if len(trimmed) > TITLE_MAX_LENGTH:
        raise InvalidInputError(
            ErrorCode.TITLE_TOO_LONG,
            f"Post title must not exceed {TITLE_MAX_LENGTH} characters",
        )


def _validate_content(content: str) -> None:
    if not content or not content.strip():
        raise InvalidInputError(ErrorCode.INVALID_CONTENT, "Post content is required")
    if len(strip_markup(content)) < CONTENT_MIN_LENGTH:
        raise InvalidInputError(
            ErrorCode.CONTENT_TOO_SHORT,
            f"Post content must be at least {CONTENT_MIN_LENGTH} characters",
        )
