"""Data access helpers for notifications."""
from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from agora_stage.db.time import utcnow
from agora_stage.models.notification import Notification

__all__ = ["NotificationRepository"]


class NotificationRepository:
    """Persistence for notifications; archived rows are hidden from reads."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, notification: Notification) -> Notification:
        self.session.add(notification)
        self.session.flush()
        return notification

    def get_by_id(
        self, notification_id: str, *, include_archived: bool = False
    ) -> Notification | None:
        stmt = select(Notification).where(Notification.id == notification_id)
        if not include_archived:
            stmt = stmt.where(Notification.deleted_at.is_(None))
        return self.session.execute(stmt).scalars().first()

    def list_for_user(
        self,
        user_id: str,
        *,
        include_read: bool = False,
        limit: int = 50,
    ) -> list[Notification]:
        """Return the user's notifications unread first, then newest first."""
        stmt = select(Notification).where(
            Notification.user_id == user_id,
            Notification.deleted_at.is_(None),
        )
        if not include_read:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(
            Notification.is_read.asc(),
            Notification.created_at.desc(),
            Notification.id.desc(),
        ).limit(limit)
        return list(self.session.execute(stmt).scalars())

    def count_unread(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(Notification).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
            Notification.deleted_at.is_(None),
        )
        return int(self.session.execute(stmt).scalar() or 0)

    def mark_all_as_read(self, user_id: str) -> int:
        """Mark every unread, active notification of ``user_id`` as read."""
        result = self.session.execute(
            update(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
                Notification.deleted_at.is_(None),
            )
            .values(is_read=True, read_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        self.session.flush()
        return result.rowcount or 0

    def update(self, notification: Notification) -> Notification:
        self.session.add(notification)
        self.session.flush()
        return notification
