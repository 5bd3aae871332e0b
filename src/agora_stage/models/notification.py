# src/agora_stage/models/notification.py
"""SQLAlchemy model for cross-user alerts."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from agora_stage.core.errors import ConflictError, ErrorCode, InvalidInputError
from agora_stage.db.session import Base
from agora_stage.db.time import utcnow

MESSAGE_MAX_LENGTH = 500


class NotificationType(str, Enum):
    """Events that can alert a user."""

    MENTION = "MENTION"  # @mentioned in a post or comment
    REPLY = "REPLY"  # someone replied to the user's comment
    COMMENT_ON_POST = "COMMENT_ON_POST"  # new top-level comment on the user's post
    LIKE = "LIKE"
    NEW_POST = "NEW_POST"


class Notification(Base):
    """A single alert for one recipient within one community.

    Notifications move only forward: unread -> read and active -> archived.
    """

    __tablename__ = "notification"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_account.id"), nullable=False, index=True
    )
    community_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("community.id"), nullable=False
    )
    type: Mapped[NotificationType] = mapped_column(
        SAEnum(NotificationType, native_enum=False, length=32),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(String(MESSAGE_MAX_LENGTH), nullable=False)
    link_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    actor_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("user_account.id"), nullable=True
    )
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @classmethod
    def create(
        cls,
        *,
        id: str,
        user_id: str,
        community_id: str,
        type: NotificationType,
        message: str,
        link_url: str | None = None,
        actor_id: str | None = None,
    ) -> Notification:
        _validate_message(message)
        return cls(
            id=id,
            user_id=user_id,
            community_id=community_id,
            type=NotificationType(type),
            message=message,
            link_url=link_url,
            actor_id=actor_id,
            is_read=False,
            read_at=None,
            created_at=utcnow(),
            deleted_at=None,
        )

    @property
    def is_archived(self) -> bool:
        return self.deleted_at is not None

    def mark_as_read(self) -> None:
        if self.is_archived:
            raise ConflictError(
                ErrorCode.CANNOT_MODIFY_ARCHIVED_NOTIFICATION,
                "Cannot modify archived notification",
            )
        if self.is_read:
            raise ConflictError(
                ErrorCode.NOTIFICATION_ALREADY_READ,
                "Notification is already marked as read",
            )
        self.is_read = True
        self.read_at = utcnow()

    def archive(self) -> None:
        if self.is_archived:
            raise ConflictError(
                ErrorCode.NOTIFICATION_ALREADY_ARCHIVED,
                "Notification is already archived",
            )
        self.deleted_at = utcnow()


def _validate_message(message: str) -> None:
    if not message or not message.strip():
        raise InvalidInputError(ErrorCode.INVALID_MESSAGE, "Notification message cannot be empty")
    if len(message) > MESSAGE_MAX_LENGTH:
        raise InvalidInputError(
            ErrorCode.MESSAGE_TOO_LONG,
            f"Notification message too long (max {MESSAGE_MAX_LENGTH} characters)",
        )
