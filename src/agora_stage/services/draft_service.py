"""Use cases for autosaved post drafts."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from agora_stage.core.errors import ErrorCode, NotFoundError
from agora_stage.db.session import transaction
from agora_stage.db.time import utcnow
from agora_stage.models.post_draft import PostDraft
from agora_stage.repositories.draft_repo import PostDraftRepository
from agora_stage.repositories.post_repo import PostRepository
from agora_stage.repositories.user_repo import UserRepository
from agora_stage.schemas.draft import DraftOut, DraftSave
from agora_stage.utils.ids import IdFactory, new_id

logger = logging.getLogger(__name__)


class DraftService:
    """Keeps one autosaved draft per user and post, each living for a limited time."""

    def __init__(self, db: Session, *, id_factory: IdFactory = new_id) -> None:
        self.db = db
        self.drafts = PostDraftRepository(db)
        self.posts = PostRepository(db)
        self.users = UserRepository(db)
        self.id_factory = id_factory

    def save_draft(self, payload: DraftSave) -> DraftOut:
        """Create the user's draft or overwrite the existing one.

        Saving restarts the expiry window. An expired draft that has not been
        purged yet is overwritten like any other.

        Raises:
            InvalidInputError: If the content is not a non-empty JSON object.
            NotFoundError: If the user, or the post being edited, does not exist.
        """
        with transaction(self.db):
            if self.users.get_by_id(payload.user_id) is None:
                raise NotFoundError(
                    ErrorCode.USER_NOT_FOUND, f"User {payload.user_id} not found"
                )
            if payload.post_id is not None and self.posts.get_by_id(payload.post_id) is None:
                raise NotFoundError(ErrorCode.POST_NOT_FOUND, f"Post {payload.post_id} not found")

            draft = self.drafts.find_for_user(payload.user_id, payload.post_id)
            if draft is None:
                draft = PostDraft.create(
                    id=self.id_factory(),
                    user_id=payload.user_id,
                    post_id=payload.post_id,
                    content=payload.content,
                )
                self.drafts.create(draft)
            else:
                draft.update_content(payload.content)
                self.drafts.update(draft)
        return DraftOut.model_validate(draft)

    def get_draft(self, user_id: str, post_id: str | None = None) -> DraftOut:
        """Return the user's unexpired draft for ``post_id`` (or for a new post)."""
        draft = self.drafts.find_for_user(user_id, post_id)
        if draft is None or draft.is_expired():
            raise NotFoundError(ErrorCode.DRAFT_NOT_FOUND, "No saved draft")
        return DraftOut.model_validate(draft)

    def purge_expired(self, now: datetime | None = None) -> int:
        with transaction(self.db):
            removed = self.drafts.delete_expired(now or utcnow())
        if removed:
            logger.info("Purged %d expired post draft(s)", removed)
        return removed
