"""Use cases for comments and one-level replies."""

from __future__ import annotations

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
from agora_stage.models.like import Like
from agora_stage.models.post import Post
from agora_stage.repositories.comment_repo import CommentRepository
from agora_stage.repositories.like_repo import LikeRepository
from agora_stage.repositories.post_repo import PostRepository
from agora_stage.repositories.user_repo import UserRepository
from agora_stage.repositories.version_repo import ContentVersionRepository
from agora_stage.schemas.comment import CommentCreate, CommentOut, CommentThread
from agora_stage.services.fanout import CommentCreated, NotificationFanout
from agora_stage.utils.ids import IdFactory, new_id

logger = logging.getLogger(__name__)


class CommentService:
    """Creates and manages comments, keeping the post's comment counter in step."""

    def __init__(
        self,
        db: Session,
        *,
        fanout: NotificationFanout,
        id_factory: IdFactory = new_id,
    ) -> None:
        self.db = db
        self.comments = CommentRepository(db)
        self.posts = PostRepository(db)
        self.versions = ContentVersionRepository(db)
        self.likes = LikeRepository(db)
        self.users = UserRepository(db)
        self.fanout = fanout
        self.id_factory = id_factory

    def create_comment(self, payload: CommentCreate) -> CommentOut:
        """Create a top-level comment or a reply and schedule its notifications.

        Checks run before anything is written, so a rejected comment leaves
        no row behind and does not touch the post's comment counter.

        Raises:
            InvalidInputError: If the content is blank.
            NotFoundError: If the post or the parent comment does not exist.
            ConflictError: If the post or parent is archived, the parent is
                itself a reply, or the parent belongs to another post.
        """
        if not payload.content or not payload.content.strip():
            raise InvalidInputError(ErrorCode.INVALID_CONTENT, "Comment content is required")

        with transaction(self.db):
            post = self.posts.get_by_id(payload.post_id, include_archived=True)
            if post is None:
                raise NotFoundError(ErrorCode.POST_NOT_FOUND, f"Post {payload.post_id} not found")
            if post.is_archived:
                raise ConflictError(
                    ErrorCode.CANNOT_COMMENT_ON_ARCHIVED_POST,
                    "Cannot comment on an archived post",
                )
            if payload.parent_id is not None:
                self._check_parent(payload.parent_id, post)

            comment = Comment.create(
                id=self.id_factory(),
                post_id=post.id,
                author_id=payload.author_id,
                content=payload.content,
                parent_id=payload.parent_id,
            )
            self.comments.create(comment)
            post.increment_comment_count()
            self.posts.update(post)
            self.versions.create(
                comment.create_version_snapshot(1, version_id=self.id_factory())
            )

        logger.info("Created comment %s on post %s", comment.id, post.id)
        self.fanout.comment_created(
            CommentCreated(
                comment_id=comment.id,
                post_id=post.id,
                community_id=post.community_id,
                post_author_id=post.author_id,
                author_id=comment.author_id,
                content=comment.content,
                parent_id=comment.parent_id,
            )
        )
        return CommentOut.model_validate(comment)

    def get_comment(self, comment_id: str) -> CommentOut:
        return CommentOut.model_validate(self._get(comment_id))

    def list_comments(self, post_id: str) -> list[CommentThread]:
        """Return top-level comments oldest first, each followed by its replies."""
        comments = self.comments.list_for_post(post_id)
        threads: dict[str, CommentThread] = {}
        replies: list[Comment] = []
        for comment in comments:
            if comment.is_top_level:
                threads[comment.id] = CommentThread(comment=CommentOut.model_validate(comment))
            else:
                replies.append(comment)
        for reply in replies:
            thread = threads.get(reply.parent_id or "")
            # Replies under an archived parent stay hidden with it.
            if thread is not None:
                thread.replies.append(CommentOut.model_validate(reply))
        return list(threads.values())

    def update_comment(self, comment_id: str, content: str) -> CommentOut:
        """Replace a comment's content; a change appends a new version."""
        with transaction(self.db):
            comment = self._get(comment_id, include_archived=True)
            if comment.update(content):
                number = self.versions.next_version_number(comment.ref)
                self.versions.create(
                    comment.create_version_snapshot(number, version_id=self.id_factory())
                )
            self.comments.update(comment)
        return CommentOut.model_validate(comment)

    def archive_comment(self, comment_id: str) -> CommentOut:
        """Archive a comment and decrement its post's comment counter."""
        with transaction(self.db):
            comment = self._get(comment_id, include_archived=True)
            comment.archive()
            self.comments.update(comment)
            post = self.posts.get_by_id(comment.post_id, include_archived=True)
            if post is not None:
                post.decrement_comment_count()
                self.posts.update(post)
        return CommentOut.model_validate(comment)

    def restore_comment(self, comment_id: str) -> CommentOut:
        """Restore an archived comment and count it on its post again."""
        with transaction(self.db):
            comment = self._get(comment_id, include_archived=True)
            comment.restore()
            self.comments.update(comment)
            post = self.posts.get_by_id(comment.post_id, include_archived=True)
            if post is not None:
                post.increment_comment_count()
                self.posts.update(post)
        return CommentOut.model_validate(comment)

    def like_comment(self, comment_id: str, user_id: str) -> CommentOut:
        """Record a like by ``user_id``; a second like by the same user is rejected."""
        with transaction(self.db):
            if self.users.get_by_id(user_id) is None:
                raise NotFoundError(ErrorCode.USER_NOT_FOUND, f"User {user_id} not found")
            comment = self._get(comment_id)
            if self.likes.find_for_comment(user_id, comment_id) is not None:
                raise ConflictError(
                    ErrorCode.ALREADY_LIKED,
                    f"User {user_id} already liked comment {comment_id}",
                )
            self.likes.create(
                Like.for_comment(id=self.id_factory(), user_id=user_id, comment_id=comment_id)
            )
            comment.increment_like_count()
            self.comments.update(comment)
        return CommentOut.model_validate(comment)

    def mark_comment_helpful(self, comment_id: str) -> CommentOut:
        with transaction(self.db):
            comment = self._get(comment_id)
            comment.increment_helpful_count()
            self.comments.update(comment)
        return CommentOut.model_validate(comment)

    def _check_parent(self, parent_id: str, post: Post) -> None:
        parent = self.comments.get_by_id(parent_id, include_archived=True)
        if parent is None:
            raise NotFoundError(
                ErrorCode.PARENT_COMMENT_NOT_FOUND, f"Parent comment {parent_id} not found"
            )
        if parent.is_archived:
            raise ConflictError(
                ErrorCode.CANNOT_REPLY_TO_ARCHIVED_COMMENT,
                "Cannot reply to an archived comment",
            )
        if parent.is_reply:
            raise ConflictError(
                ErrorCode.MAX_NESTING_DEPTH_EXCEEDED,
                "Replies can only be made to top-level comments",
            )
        if parent.post_id != post.id:
            raise ConflictError(
                ErrorCode.PARENT_ON_DIFFERENT_POST,
                "Parent comment belongs to a different post",
            )

    def _get(self, comment_id: str, *, include_archived: bool = False) -> Comment:
        comment = self.comments.get_by_id(comment_id, include_archived=include_archived)
        if comment is None:
            raise NotFoundError(ErrorCode.COMMENT_NOT_FOUND, f"Comment {comment_id} not found")
        return comment
