# src/agora_stage/models/post_draft.py
"""SQLAlchemy model for autosaved post composer drafts."""

from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from agora_stage.core.errors import ErrorCode, InvalidInputError
from agora_stage.core.settings import settings
from agora_stage.db.session import Base
from agora_stage.db.time import utcnow

SECONDS_PER_DAY = 24 * 60 * 60


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes for timezone-aware columns.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _validate_content(content: Any) -> dict[str, Any]:
    if isinstance(content, list):
        raise InvalidInputError(
            ErrorCode.INVALID_DRAFT_CONTENT, "Draft content must be an object, not an array"
        )
    if not isinstance(content, dict):
        raise InvalidInputError(
            ErrorCode.INVALID_DRAFT_CONTENT, "Draft content must be a JSON object"
        )
    if not content:
        raise InvalidInputError(ErrorCode.INVALID_DRAFT_CONTENT, "Draft content is empty")
    return dict(content)


class PostDraft(Base):
    """Composer state saved for one user, either for a new post or an existing one.

    Every save pushes ``expires_at`` out to ``post_draft_ttl_days`` after the
    save; expired drafts are ignored on read and purged in bulk.
    """

    __tablename__ = "post_draft"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_account.id"), nullable=False, index=True
    )
    # NULL while composing a post that does not exist yet.
    post_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("post.id", ondelete="CASCADE"), nullable=True
    )
    content: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    saved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    @classmethod
    def create(
        cls,
        *,
        id: str,
        user_id: str,
        content: Any,
        post_id: str | None = None,
        now: datetime | None = None,
    ) -> PostDraft:
        draft = cls(id=id, user_id=user_id, post_id=post_id)
        draft.update_content(content, now=now)
        return draft

    def update_content(self, content: Any, *, now: datetime | None = None) -> None:
        """Replace the saved content and restart the expiry window."""
        self.content = _validate_content(content)
        self.saved_at = now or utcnow()
        self.expires_at = self.saved_at + timedelta(days=settings.post_draft_ttl_days)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) > _aware(self.expires_at)

    def days_until_expiration(self, now: datetime | None = None) -> int:
        """Whole days left, rounded up; zero or negative once expired."""
        remaining = _aware(self.expires_at) - (now or utcnow())
        return math.ceil(remaining.total_seconds() / SECONDS_PER_DAY)

    @property
    def has_post(self) -> bool:
        return self.post_id is not None

    def __repr__(self) -> str:
        return f"<PostDraft {self.id} user={self.user_id} post={self.post_id}>"
