"""Content version Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from agora_stage.models.content_version import ContentType


class ContentVersionOut(BaseModel):
    """A single immutable snapshot."""

    id: str
    content_type: ContentType
    content_id: str
    content: str
    version_number: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VersionComparison(BaseModel):
    """Two snapshots of the same content plus a unified diff between them."""

    content_type: ContentType
    content_id: str
    old_version: ContentVersionOut
    new_version: ContentVersionOut
    diff: list[str]
