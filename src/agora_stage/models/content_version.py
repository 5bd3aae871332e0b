# src/agora_stage/models/content_version.py
"""Immutable, numbered snapshots of post and comment content."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, validates

from agora_stage.core.errors import ConflictError, ErrorCode, InvalidInputError
from agora_stage.db.session import Base
from agora_stage.db.time import utcnow


class ContentType(str, Enum):
    """Kind of content a version belongs to."""

    POST = "POST"
    COMMENT = "COMMENT"


@dataclass(frozen=True)
class PostRef:
    """Reference to a post's content history."""

    id: str
    content_type: ClassVar[ContentType] = ContentType.POST


@dataclass(frozen=True)
class CommentRef:
    """Reference to a comment's content history."""

    id: str
    content_type: ClassVar[ContentType] = ContentType.COMMENT


ContentRef = PostRef | CommentRef

_IMMUTABLE_FIELDS = ("content_type", "content_id", "content", "version_number")


def ref_for(content_type: ContentType | str, content_id: str) -> ContentRef:
    """Build the typed reference for a (discriminator, id) pair."""
    try:
        kind = ContentType(content_type)
    except ValueError as err:
        raise InvalidInputError(
            ErrorCode.UNKNOWN_CONTENT_TYPE,
            f"Unknown content type: {content_type!r}",
        ) from err
    if kind is ContentType.POST:
        return PostRef(content_id)
    return CommentRef(content_id)


class ContentVersion(Base):
    """Point-in-time copy of a post's or comment's content.

    Versions are append-only audit records: they are never archived, restored
    or edited. Numbers start at 1 per content item and are assigned by the
    caller inside the same transaction that mutates the content.
    """

    __tablename__ = "content_version"
    __table_args__ = (
        UniqueConstraint(
            "content_type",
            "content_id",
            "version_number",
            name="uq_content_version_number",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    content_type: Mapped[ContentType] = mapped_column(
        SAEnum(ContentType, native_enum=False, length=16),
        nullable=False,
    )
    # Post.id or Comment.id depending on content_type; use ``ref`` rather than
    # reading the pair directly.
    content_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    @classmethod
    def create(
        cls,
        *,
        id: str,
        ref: ContentRef,
        content: str,
        version_number: int,
    ) -> ContentVersion:
        """Validate and build a new snapshot for ``ref``."""
        if not isinstance(ref, PostRef | CommentRef):
            raise InvalidInputError(
                ErrorCode.UNKNOWN_CONTENT_TYPE,
                f"Unsupported content reference: {ref!r}",
            )
        _validate_version_number(version_number)
        _validate_snapshot(content)
        return cls(
            id=id,
            content_type=ref.content_type,
            content_id=ref.id,
            content=content,
            version_number=version_number,
            created_at=utcnow(),
        )

    @property
    def ref(self) -> ContentRef:
        """Typed reference to the owning post or comment."""
        return ref_for(self.content_type, self.content_id)

    @property
    def is_post_version(self) -> bool:
        return isinstance(self.ref, PostRef)

    @property
    def is_comment_version(self) -> bool:
        return isinstance(self.ref, CommentRef)

    @validates(*_IMMUTABLE_FIELDS)
    def _guard_immutable(self, key: str, value: Any) -> Any:
        current = self.__dict__.get(key)
        if current is not None and current != value:
            raise ConflictError(
                ErrorCode.VERSION_IMMUTABLE,
                f"Content versions are immutable; cannot change {key}",
            )
        return value


def _validate_version_number(version_number: int) -> None:
    if isinstance(version_number, bool) or not isinstance(version_number, int):
        raise InvalidInputError(
            ErrorCode.INVALID_VERSION_NUMBER, "Version number must be an integer"
        )
    if version_number < 1:
        raise InvalidInputError(
            ErrorCode.INVALID_VERSION_NUMBER, "Version number must be at least 1"
        )


def _validate_snapshot(content: str) -> None:
    if not content or not content.strip():
        raise InvalidInputError(
            ErrorCode.INVALID_SNAPSHOT,
            "Content snapshot is required and cannot be empty",
        )
