"""Use cases for browsing, comparing and restoring content history."""

from __future__ import annotations

import difflib
import logging

from sqlalchemy.orm import Session

from agora_stage.core.errors import (
    ConflictError,
    ErrorCode,
    InvalidInputError,
    NotFoundError,
)
from agora_stage.db.session import transaction
from agora_stage.models.comment import Comment
from agora_stage.models.content_version import CommentRef, ContentRef, ContentVersion, PostRef
from agora_stage.models.post import Post
from agora_stage.repositories.comment_repo import CommentRepository
from agora_stage.repositories.post_repo import PostRepository
from agora_stage.repositories.version_repo import ContentVersionRepository
from agora_stage.schemas.comment import CommentOut
from agora_stage.schemas.post import PostOut
from agora_stage.schemas.version import ContentVersionOut, VersionComparison
from agora_stage.utils.ids import IdFactory, new_id

logger = logging.getLogger(__name__)


class VersionService:
    """Read access to version history plus restore-to-version for posts and comments."""

    def __init__(self, db: Session, *, id_factory: IdFactory = new_id) -> None:
        self.db = db
        self.versions = ContentVersionRepository(db)
        self.posts = PostRepository(db)
        self.comments = CommentRepository(db)
        self.id_factory = id_factory

    def get_history(self, ref: ContentRef) -> list[ContentVersionOut]:
        """Return every version of ``ref`` oldest first; empty if it has none."""
        return [ContentVersionOut.model_validate(v) for v in self.versions.list_for(ref)]

    def get_version(self, ref: ContentRef, version_number: int) -> ContentVersionOut:
        return ContentVersionOut.model_validate(self._get_version(ref, version_number))

    def compare_versions(
        self, ref: ContentRef, old_number: int, new_number: int
    ) -> VersionComparison:
        """Return two snapshots of ``ref`` and a unified diff from old to new."""
        if old_number < 1 or new_number < 1:
            raise InvalidInputError(
                ErrorCode.INVALID_INPUT, "Version numbers must be positive integers"
            )
        if old_number == new_number:
            raise InvalidInputError(
                ErrorCode.INVALID_INPUT, "Cannot compare a version with itself"
            )

        old = self._get_version(ref, old_number)
        new = self._get_version(ref, new_number)
        diff = list(
            difflib.unified_diff(
                old.content.splitlines(),
                new.content.splitlines(),
                fromfile=f"v{old_number}",
                tofile=f"v{new_number}",
                lineterm="",
            )
        )
        return VersionComparison(
            content_type=ref.content_type,
            content_id=ref.id,
            old_version=ContentVersionOut.model_validate(old),
            new_version=ContentVersionOut.model_validate(new),
            diff=diff,
        )

    def restore_post_version(self, post_id: str, version_number: int) -> PostOut:
        """Make an older version the post's content again, recorded as a new version."""
        ref = PostRef(post_id)
        with transaction(self.db):
            version = self._get_version(ref, version_number)
            post = self.posts.get_by_id(post_id, include_archived=True)
            if post is None:
                raise NotFoundError(ErrorCode.POST_NOT_FOUND, f"Post {post_id} not found")
            latest = self._ensure_not_current(ref, version)
            post.update(content=version.content)
            self.posts.update(post)
            self._append_snapshot(post, latest + 1)
        logger.info("Restored post %s to version %d", post_id, version_number)
        return PostOut.model_validate(post)

    def restore_comment_version(self, comment_id: str, version_number: int) -> CommentOut:
        """Make an older version the comment's content again, recorded as a new version."""
        ref = CommentRef(comment_id)
        with transaction(self.db):
            version = self._get_version(ref, version_number)
            comment = self.comments.get_by_id(comment_id, include_archived=True)
            if comment is None:
                raise NotFoundError(
                    ErrorCode.COMMENT_NOT_FOUND, f"Comment {comment_id} not found"
                )
            latest = self._ensure_not_current(ref, version)
            comment.update(version.content)
            self.comments.update(comment)
            self._append_snapshot(comment, latest + 1)
        logger.info("Restored comment %s to version %d", comment_id, version_number)
        return CommentOut.model_validate(comment)

    def _get_version(self, ref: ContentRef, version_number: int) -> ContentVersion:
        version = self.versions.get(ref, version_number)
        if version is None:
            raise NotFoundError(
                ErrorCode.VERSION_NOT_FOUND,
                f"Version {version_number} of {ref.content_type.value.lower()} {ref.id} not found",
            )
        return version

    def _ensure_not_current(self, ref: ContentRef, version: ContentVersion) -> int:
        latest = self.versions.get_latest(ref)
        latest_number = latest.version_number if latest is not None else 0
        if version.version_number == latest_number:
            raise ConflictError(
                ErrorCode.CANNOT_RESTORE_CURRENT_VERSION,
                "Cannot restore the current version",
            )
        return latest_number

    def _append_snapshot(self, content: Post | Comment, number: int) -> None:
        self.versions.create(
            content.create_version_snapshot(number, version_id=self.id_factory())
        )
