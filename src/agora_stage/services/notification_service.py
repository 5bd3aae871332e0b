"""Use cases for creating and managing a user's notifications."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.orm import Session

from agora_stage.core.errors import (
    ErrorCode,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from agora_stage.core.settings import settings
from agora_stage.db.session import transaction
from agora_stage.models.notification import Notification
from agora_stage.repositories.notification_repo import NotificationRepository
from agora_stage.repositories.user_repo import UserRepository
from agora_stage.schemas.notification import NotificationCreate, NotificationOut
from agora_stage.services.dispatch import BackgroundDispatcher, get_dispatcher
from agora_stage.services.email import (
    EmailError,
    EmailSender,
    get_email_sender,
    render_notification_email,
)
from agora_stage.utils.ids import IdFactory, new_id

logger = logging.getLogger(__name__)


class NotificationService:
    """Creates notifications and manages their read/archive state."""

    def __init__(
        self,
        db: Session,
        *,
        email_sender: EmailSender | None = None,
        dispatcher: BackgroundDispatcher | None = None,
        id_factory: IdFactory = new_id,
    ) -> None:
        self.db = db
        self.notifications = NotificationRepository(db)
        self.users = UserRepository(db)
        self.email_sender = email_sender or get_email_sender()
        self.dispatcher = dispatcher or get_dispatcher()
        self.id_factory = id_factory

    def create_notification(self, payload: NotificationCreate) -> NotificationOut:
        """Persist one notification and queue its email.

        The email send is detached: its failure is logged and never affects
        the returned notification.

        Raises:
            InvalidInputError: If the message, recipient or community is blank.
            NotFoundError: If the recipient or the actor does not exist.
        """
        if not payload.message or not payload.message.strip():
            raise InvalidInputError(ErrorCode.INVALID_MESSAGE, "Notification message cannot be empty")
        if not payload.user_id.strip() or not payload.community_id.strip():
            raise InvalidInputError(
                ErrorCode.INVALID_INPUT, "Recipient and community are required"
            )

        recipient = self.users.get_by_id(payload.user_id)
        if recipient is None:
            raise NotFoundError(ErrorCode.USER_NOT_FOUND, f"User {payload.user_id} not found")

        actor_name: str | None = None
        if payload.actor_id:
            actor = self.users.get_by_id(payload.actor_id)
            if actor is None:
                raise NotFoundError(
                    ErrorCode.ACTOR_NOT_FOUND, f"Actor {payload.actor_id} not found"
                )
            actor_name = actor.display_name

        with transaction(self.db):
            notification = self.notifications.create(
                Notification.create(
                    id=self.id_factory(),
                    user_id=payload.user_id,
                    community_id=payload.community_id,
                    type=payload.type,
                    message=payload.message,
                    link_url=payload.link_url,
                    actor_id=payload.actor_id,
                )
            )

        self._queue_email(recipient.email, notification)
        return _to_out(notification, actor_name)

    def list_for_user(self, user_id: str, limit: int | None = None) -> list[NotificationOut]:
        """Return active notifications, unread first and then newest first."""
        rows = self.notifications.list_for_user(
            user_id,
            include_read=True,
            limit=limit or settings.notification_list_limit,
        )
        names = self._actor_names(n.actor_id for n in rows)
        return [_to_out(n, names.get(n.actor_id or "")) for n in rows]

    def unread_count(self, user_id: str) -> int:
        return self.notifications.count_unread(user_id)

    def mark_read(self, notification_id: str, user_id: str) -> NotificationOut:
        """Mark a notification owned by ``user_id`` as read."""
        with transaction(self.db):
            notification = self._get_owned(notification_id, user_id)
            notification.mark_as_read()
            self.notifications.update(notification)
        return self._with_actor(notification)

    def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of ``user_id`` as read; returns the count."""
        with transaction(self.db):
            updated = self.notifications.mark_all_as_read(user_id)
        logger.debug("Marked %d notification(s) read for user %s", updated, user_id)
        return updated

    def archive_notification(self, notification_id: str, user_id: str) -> NotificationOut:
        with transaction(self.db):
            notification = self._get_owned(notification_id, user_id)
            notification.archive()
            self.notifications.update(notification)
        return self._with_actor(notification)

    def _get_owned(self, notification_id: str, user_id: str) -> Notification:
        # Archived rows are loaded so that state errors beat "not found".
        notification = self.notifications.get_by_id(notification_id, include_archived=True)
        if notification is None:
            raise NotFoundError(
                ErrorCode.NOTIFICATION_NOT_FOUND,
                f"Notification {notification_id} not found",
            )
        if notification.user_id != user_id:
            raise ForbiddenError(
                ErrorCode.NOTIFICATION_NOT_OWNED_BY_USER,
                "Notification belongs to another user",
            )
        return notification

    def _actor_names(self, actor_ids: Iterable[str | None]) -> dict[str, str]:
        names: dict[str, str] = {}
        for actor_id in {a for a in actor_ids if a}:
            actor = self.users.get_by_id(actor_id)
            if actor is not None:
                names[actor_id] = actor.display_name
        return names

    def _with_actor(self, notification: Notification) -> NotificationOut:
        names = self._actor_names([notification.actor_id])
        return _to_out(notification, names.get(notification.actor_id or ""))

    def _queue_email(self, to: str, notification: Notification) -> None:
        message = render_notification_email(to, notification.message, notification.link_url)
        sender = self.email_sender
        notification_id = notification.id

        def send() -> None:
            try:
                sender.send_notification(message)
            except EmailError:
                logger.warning(
                    "Failed to send email for notification %s to %s",
                    notification_id,
                    to,
                    exc_info=True,
                )

        self.dispatcher.submit(send, label=f"email:notification:{notification_id}")


def _to_out(notification: Notification, actor_name: str | None) -> NotificationOut:
    out = NotificationOut.model_validate(notification)
    return out.model_copy(update={"actor_name": actor_name})
