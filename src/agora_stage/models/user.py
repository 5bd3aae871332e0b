# src/agora_stage/models/user.py
"""SQLAlchemy model for community members referenced by content."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agora_stage.db.session import Base
from agora_stage.db.time import utcnow


class User(Base):
    """Account that authors content and receives notifications.

    Authentication lives elsewhere; this table only carries what notification
    delivery needs (an address and a name to show as the actor).
    """

    __tablename__ = "user_account"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
