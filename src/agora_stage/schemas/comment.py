"""Comment-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    """Schema for creating a top-level comment or a reply."""

    post_id: str
    author_id: str
    content: str = Field(..., description="Rich-text (HTML) body")
    parent_id: str | None = Field(None, description="Parent comment ID for replies")


class CommentOut(BaseModel):
    """Schema for comment information returned to callers."""

    id: str
    post_id: str
    author_id: str
    parent_id: str | None = None
    content: str
    mentioned_user_ids: list[str]
    like_count: int
    helpful_count: int
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class CommentThread(BaseModel):
    """A top-level comment followed by its replies."""

    comment: CommentOut
    replies: list[CommentOut] = Field(default_factory=list)
