"""Notification Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from agora_stage.models.notification import NotificationType


class NotificationCreate(BaseModel):
    """Input for creating one notification."""

    user_id: str = Field(..., description="Recipient user ID")
    community_id: str
    type: NotificationType
    message: str
    link_url: str | None = None
    actor_id: str | None = Field(None, description="User who triggered the notification")


class NotificationOut(BaseModel):
    """Notification as shown in a user's inbox."""

    id: str
    user_id: str
    community_id: str
    type: NotificationType
    message: str
    link_url: str | None = None
    actor_id: str | None = None
    actor_name: str | None = None
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
