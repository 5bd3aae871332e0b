"""SQLAlchemy model for communities that own posts and notifications."""
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agora_stage.db.session import Base


class Community(Base):
    """Community metadata used for grouping posts and scoping notifications."""

    __tablename__ = "community"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    # Internal identifier akin to a handle.
    slug: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
