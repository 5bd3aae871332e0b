"""Post draft Pydantic schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DraftSave(BaseModel):
    """Schema for autosaving composer state.

    ``content`` is checked by the entity so a non-object carries a precise
    error code.
    """

    user_id: str = Field(..., description="Owning user ID")
    post_id: str | None = Field(None, description="Post being edited; None for a new post")
    content: Any = Field(..., description="Composer state as a JSON object")


class DraftOut(BaseModel):
    """Schema for a saved draft returned to callers."""

    id: str
    user_id: str
    post_id: str | None = None
    content: dict[str, Any]
    saved_at: datetime
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)
