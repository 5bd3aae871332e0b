"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PostCreate(BaseModel):
    """Schema for creating a new (draft) post.

    Lengths are checked by the entity so failures carry precise error codes.
    """

    community_id: str = Field(..., description="Owning community ID")
    author_id: str = Field(..., description="Authoring user ID")
    title: str = Field(..., description="Title, 3-200 characters after trimming")
    content: str = Field(..., description="Rich-text (HTML) body")


class PostUpdate(BaseModel):
    """Schema for editing a post; at least one field must be supplied."""

    title: str | None = None
    content: str | None = None


class PostOut(BaseModel):
    """Schema for post information returned to callers."""

    id: str
    community_id: str
    author_id: str
    title: str
    content: str
    mentioned_user_ids: list[str]
    is_pinned: bool
    is_solved: bool
    like_count: int
    helpful_count: int
    comment_count: int
    view_count: int
    created_at: datetime
    updated_at: datetime
    published_at: datetime | None = None
    deleted_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
