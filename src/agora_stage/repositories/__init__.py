"""Thin data-access wrappers around a SQLAlchemy session."""

from .comment_repo import CommentRepository
from .draft_repo import PostDraftRepository
from .like_repo import LikeRepository
from .notification_repo import NotificationRepository
from .post_repo import PostRepository
from .user_repo import UserRepository
from .version_repo import ContentVersionRepository

__all__ = [
    "CommentRepository",
    "ContentVersionRepository",
    "LikeRepository",
    "NotificationRepository",
    "PostDraftRepository",
    "PostRepository",
    "UserRepository",
]
