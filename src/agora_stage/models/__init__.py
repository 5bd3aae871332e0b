# src/agora_stage/models/__init__.py
"""SQLAlchemy models for the Agora application."""

from .comment import Comment
from .community import Community
from .content_version import CommentRef, ContentRef, ContentType, ContentVersion, PostRef
from .like import Like
from .notification import Notification, NotificationType
from .post import Post
from .post_draft import PostDraft
from .user import User

__all__ = [
    "Comment",
    "Community",
    "CommentRef", "ContentRef", "ContentType", "ContentVersion", "PostRef",
    "Like",
    "Notification", "NotificationType",
    "Post",
    "PostDraft",
    "User",
]
