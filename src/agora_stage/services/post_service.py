"""Use cases for the post lifecycle."""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy.orm import Session

from agora_stage.core.errors import ConflictError, ErrorCode, InvalidInputError, NotFoundError
from agora_stage.db.session import transaction
from agora_stage.models.like import Like
from agora_stage.models.post import Post
from agora_stage.repositories.like_repo import LikeRepository
from agora_stage.repositories.post_repo import PostRepository
from agora_stage.repositories.user_repo import UserRepository
from agora_stage.repositories.version_repo import ContentVersionRepository
from agora_stage.schemas.post import PostCreate, PostOut, PostUpdate
from agora_stage.services.fanout import NotificationFanout, PostCreated
from agora_stage.utils.ids import IdFactory, new_id

logger = logging.getLogger(__name__)


class PostService:
    """Creates, edits and moves posts through their lifecycle.

    Every method runs in its own transaction and returns a :class:`PostOut`
    snapshot. Failures surface as :class:`~agora_stage.core.errors.AgoraError`
    subclasses; nothing is persisted when one is raised.
    """

    def __init__(
        self,
        db: Session,
        *,
        fanout: NotificationFanout,
        id_factory: IdFactory = new_id,
    ) -> None:
        self.db = db
        self.posts = PostRepository(db)
        self.versions = ContentVersionRepository(db)
        self.likes = LikeRepository(db)
        self.users = UserRepository(db)
        self.fanout = fanout
        self.id_factory = id_factory

    def create_post(self, payload: PostCreate) -> PostOut:
        """Create a draft post, record version 1 and schedule mention notifications.

        Notification fan-out starts only after the post is committed and never
        affects the result of this call.
        """
        with transaction(self.db):
            post = Post.create(
                id=self.id_factory(),
                community_id=payload.community_id,
                author_id=payload.author_id,
                title=payload.title,
                content=payload.content,
            )
            self.posts.create(post)
            self.versions.create(
                post.create_version_snapshot(1, version_id=self.id_factory())
            )

        logger.info("Created post %s in community %s", post.id, post.community_id)
        self.fanout.post_created(
            PostCreated(
                post_id=post.id,
                community_id=post.community_id,
                author_id=post.author_id,
                content=post.content,
            )
        )
        return PostOut.model_validate(post)

    def get_post(self, post_id: str) -> PostOut:
        return PostOut.model_validate(self._get(post_id))

    def list_posts(self, community_id: str, *, include_drafts: bool = False) -> list[PostOut]:
        """Return active posts of a community, pinned first and then newest first."""
        posts = self.posts.list_for_community(community_id, include_drafts=include_drafts)
        return [PostOut.model_validate(p) for p in posts]

    def update_post(self, post_id: str, payload: PostUpdate) -> PostOut:
        """Edit title and/or content; a content change appends a new version."""
        if payload.title is None and payload.content is None:
            raise InvalidInputError(
                ErrorCode.INVALID_INPUT, "Provide a title or content to update"
            )

        with transaction(self.db):
            post = self._get(post_id, include_archived=True)
            content_changed = post.update(title=payload.title, content=payload.content)
            self.posts.update(post)
            if content_changed:
                number = self.versions.next_version_number(post.ref)
                self.versions.create(
                    post.create_version_snapshot(number, version_id=self.id_factory())
                )
        return PostOut.model_validate(post)

    def publish_post(self, post_id: str) -> PostOut:
        return self._transition(post_id, Post.publish)

    def pin_post(self, post_id: str) -> PostOut:
        return self._transition(post_id, Post.pin)

    def unpin_post(self, post_id: str) -> PostOut:
        return self._transition(post_id, Post.unpin)

    def mark_solved(self, post_id: str) -> PostOut:
        return self._transition(post_id, Post.mark_solved)

    def mark_unsolved(self, post_id: str) -> PostOut:
        return self._transition(post_id, Post.mark_unsolved)

    def archive_post(self, post_id: str) -> PostOut:
        return self._transition(post_id, Post.archive)

    def restore_post(self, post_id: str) -> PostOut:
        return self._transition(post_id, Post.restore)

    def record_view(self, post_id: str) -> PostOut:
        return self._transition(post_id, Post.increment_view_count, include_archived=False)

    def like_post(self, post_id: str, user_id: str) -> PostOut:
        """Record a like by ``user_id`` and bump the post's like counter.

        A user likes a post at most once; repeating it raises
        ``ConflictError(ALREADY_LIKED)`` and leaves the counter alone.
        """
        with transaction(self.db):
            if self.users.get_by_id(user_id) is None:
                raise NotFoundError(ErrorCode.USER_NOT_FOUND, f"User {user_id} not found")
            post = self._get(post_id)
            if self.likes.find_for_post(user_id, post_id) is not None:
                raise ConflictError(
                    ErrorCode.ALREADY_LIKED, f"User {user_id} already liked post {post_id}"
                )
            self.likes.create(
                Like.for_post(id=self.id_factory(), user_id=user_id, post_id=post_id)
            )
            post.increment_like_count()
            self.posts.update(post)
        return PostOut.model_validate(post)

    def mark_helpful(self, post_id: str) -> PostOut:
        return self._transition(post_id, Post.increment_helpful_count, include_archived=False)

    def _transition(
        self,
        post_id: str,
        action: Callable[[Post], None],
        *,
        include_archived: bool = True,
    ) -> PostOut:
        # State transitions load archived posts too, so the entity reports
        # the precise conflict instead of a generic "not found".
        with transaction(self.db):
            post = self._get(post_id, include_archived=include_archived)
            action(post)
            self.posts.update(post)
        return PostOut.model_validate(post)

    def _get(self, post_id: str, *, include_archived: bool = False) -> Post:
        post = self.posts.get_by_id(post_id, include_archived=include_archived)
        if post is None:
            raise NotFoundError(ErrorCode.POST_NOT_FOUND, f"Post {post_id} not found")
        return post
