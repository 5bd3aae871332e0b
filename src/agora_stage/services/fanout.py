"""Notification fan-out for newly created posts and comments.

Fan-out runs after the triggering request has committed and returned. It
opens its own session, resolves recipients one at a time and creates one
notification per recipient. A failing recipient is rolled back and logged;
the remaining recipients are still notified.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from agora_stage.db.session import SessionFactory, SessionLocal
from agora_stage.models.notification import NotificationType
from agora_stage.repositories.comment_repo import CommentRepository
from agora_stage.schemas.notification import NotificationCreate
from agora_stage.services.dispatch import BackgroundDispatcher, get_dispatcher
from agora_stage.services.email import EmailSender, get_email_sender
from agora_stage.services.mentions import extract_mentioned_user_ids
from agora_stage.services.notification_service import NotificationService
from agora_stage.utils.ids import IdFactory, new_id

logger = logging.getLogger(__name__)

POST_MENTION_MESSAGE = "You were mentioned in a post"
COMMENT_MENTION_MESSAGE = "You were mentioned in a comment"
REPLY_MESSAGE = "Someone replied to your comment"
COMMENT_ON_POST_MESSAGE = "Someone commented on your post"


@dataclass(frozen=True)
class PostCreated:
    """A post was persisted."""

    post_id: str
    community_id: str
    author_id: str
    content: str


@dataclass(frozen=True)
class CommentCreated:
    """A comment or reply was persisted."""

    comment_id: str
    post_id: str
    community_id: str
    post_author_id: str
    author_id: str
    content: str
    parent_id: str | None = None


def post_link(community_id: str, post_id: str) -> str:
    return f"/communities/{community_id}/posts/{post_id}"


def comment_link(community_id: str, post_id: str, comment_id: str) -> str:
    return f"{post_link(community_id, post_id)}#comment-{comment_id}"


class NotificationFanout:
    """Turns content events into per-recipient notifications."""

    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        *,
        email_sender: EmailSender | None = None,
        dispatcher: BackgroundDispatcher | None = None,
        id_factory: IdFactory = new_id,
    ) -> None:
        self.session_factory = session_factory or SessionLocal
        self.email_sender = email_sender or get_email_sender()
        self.dispatcher = dispatcher or get_dispatcher()
        self.id_factory = id_factory

    def post_created(self, event: PostCreated) -> None:
        """Schedule fan-out for ``event``; returns immediately."""
        self.dispatcher.submit(
            lambda: self.on_post_created(event),
            label=f"fanout:post:{event.post_id}",
        )

    def comment_created(self, event: CommentCreated) -> None:
        """Schedule fan-out for ``event``; returns immediately."""
        self.dispatcher.submit(
            lambda: self.on_comment_created(event),
            label=f"fanout:comment:{event.comment_id}",
        )

    def on_post_created(self, event: PostCreated) -> None:
        """Notify every user mentioned in a new post except its author."""
        source = f"post {event.post_id}"
        link = post_link(event.community_id, event.post_id)
        with self.session_factory() as db:
            for user_id in extract_mentioned_user_ids(event.content):
                if user_id == event.author_id:
                    continue
                self._notify(
                    db,
                    source,
                    NotificationCreate(
                        user_id=user_id,
                        community_id=event.community_id,
                        type=NotificationType.MENTION,
                        message=POST_MENTION_MESSAGE,
                        link_url=link,
                        actor_id=event.author_id,
                    ),
                )

    def on_comment_created(self, event: CommentCreated) -> None:
        """Notify mentioned users, then either the parent author or the post author.

        Replies notify the parent comment's author; top-level comments notify
        the post's author. Never both.
        """
        source = f"comment {event.comment_id}"
        link = comment_link(event.community_id, event.post_id, event.comment_id)
        with self.session_factory() as db:
            for user_id in extract_mentioned_user_ids(event.content):
                if user_id == event.author_id:
                    continue
                self._notify(
                    db,
                    source,
                    NotificationCreate(
                        user_id=user_id,
                        community_id=event.community_id,
                        type=NotificationType.MENTION,
                        message=COMMENT_MENTION_MESSAGE,
                        link_url=link,
                        actor_id=event.author_id,
                    ),
                )

            if event.parent_id is not None:
                parent = CommentRepository(db).get_by_id(event.parent_id, include_archived=True)
                if parent is None:
                    logger.warning(
                        "Parent comment %s of %s vanished; skipping reply notification",
                        event.parent_id,
                        source,
                    )
                    return
                recipient, kind, message = parent.author_id, NotificationType.REPLY, REPLY_MESSAGE
            else:
                recipient = event.post_author_id
                kind, message = NotificationType.COMMENT_ON_POST, COMMENT_ON_POST_MESSAGE

            if recipient == event.author_id:
                return
            self._notify(
                db,
                source,
                NotificationCreate(
                    user_id=recipient,
                    community_id=event.community_id,
                    type=kind,
                    message=message,
                    link_url=link,
                    actor_id=event.author_id,
                ),
            )

    def _notify(self, db: Session, source: str, payload: NotificationCreate) -> None:
        service = NotificationService(
            db,
            email_sender=self.email_sender,
            dispatcher=self.dispatcher,
            id_factory=self.id_factory,
        )
        try:
            service.create_notification(payload)
        except Exception:  # noqa: BLE001 - one recipient must not block the others
            db.rollback()
            logger.exception(
                "Failed to create %s notification for user %s (%s)",
                payload.type.value,
                payload.user_id,
                source,
            )
