"""Error taxonomy shared by entities, services and the API layer.

Every failure a caller can observe is an :class:`AgoraError` subclass. The
subclass fixes the error *kind* (which presentation code maps to a status),
and the attached :class:`ErrorCode` names the precise condition so callers
can map it to a user-facing message.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    """Broad error categories used for status mapping."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STATE_CONFLICT = "state_conflict"
    FORBIDDEN = "forbidden"
    INTERNAL = "internal"


class ErrorCode(str, Enum):
    """Enumerated, caller-visible error conditions."""

    # Validation
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_TITLE = "INVALID_TITLE"
    TITLE_TOO_SHORT = "TITLE_TOO_SHORT"
    TITLE_TOO_LONG = "TITLE_TOO_LONG"
    INVALID_CONTENT = "INVALID_CONTENT"
    CONTENT_TOO_SHORT = "CONTENT_TOO_SHORT"
    INVALID_MESSAGE = "INVALID_MESSAGE"
    MESSAGE_TOO_LONG = "MESSAGE_TOO_LONG"
    INVALID_VERSION_NUMBER = "INVALID_VERSION_NUMBER"
    INVALID_SNAPSHOT = "INVALID_SNAPSHOT"
    UNKNOWN_CONTENT_TYPE = "UNKNOWN_CONTENT_TYPE"
    INVALID_DRAFT_CONTENT = "INVALID_DRAFT_CONTENT"

    # Not found
    POST_NOT_FOUND = "POST_NOT_FOUND"
    COMMENT_NOT_FOUND = "COMMENT_NOT_FOUND"
    PARENT_COMMENT_NOT_FOUND = "PARENT_COMMENT_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    ACTOR_NOT_FOUND = "ACTOR_NOT_FOUND"
    NOTIFICATION_NOT_FOUND = "NOTIFICATION_NOT_FOUND"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    DRAFT_NOT_FOUND = "DRAFT_NOT_FOUND"

    # State conflicts
    CANNOT_MODIFY_ARCHIVED_POST = "CANNOT_MODIFY_ARCHIVED_POST"
    CANNOT_MODIFY_ARCHIVED_COMMENT = "CANNOT_MODIFY_ARCHIVED_COMMENT"
    CANNOT_MODIFY_ARCHIVED_NOTIFICATION = "CANNOT_MODIFY_ARCHIVED_NOTIFICATION"
    POST_ALREADY_PUBLISHED = "POST_ALREADY_PUBLISHED"
    POST_NOT_PUBLISHED = "POST_NOT_PUBLISHED"
    POST_ALREADY_PINNED = "POST_ALREADY_PINNED"
    POST_NOT_PINNED = "POST_NOT_PINNED"
    POST_ALREADY_SOLVED = "POST_ALREADY_SOLVED"
    POST_NOT_SOLVED = "POST_NOT_SOLVED"
    POST_ALREADY_ARCHIVED = "POST_ALREADY_ARCHIVED"
    POST_NOT_ARCHIVED = "POST_NOT_ARCHIVED"
    COMMENT_ALREADY_ARCHIVED = "COMMENT_ALREADY_ARCHIVED"
    COMMENT_NOT_ARCHIVED = "COMMENT_NOT_ARCHIVED"
    CANNOT_COMMENT_ON_ARCHIVED_POST = "CANNOT_COMMENT_ON_ARCHIVED_POST"
    CANNOT_REPLY_TO_ARCHIVED_COMMENT = "CANNOT_REPLY_TO_ARCHIVED_COMMENT"
    MAX_NESTING_DEPTH_EXCEEDED = "MAX_NESTING_DEPTH_EXCEEDED"
    PARENT_ON_DIFFERENT_POST = "PARENT_ON_DIFFERENT_POST"
    NOTIFICATION_ALREADY_READ = "NOTIFICATION_ALREADY_READ"
    NOTIFICATION_ALREADY_ARCHIVED = "NOTIFICATION_ALREADY_ARCHIVED"
    CANNOT_RESTORE_CURRENT_VERSION = "CANNOT_RESTORE_CURRENT_VERSION"
    VERSION_IMMUTABLE = "VERSION_IMMUTABLE"
    ALREADY_LIKED = "ALREADY_LIKED"

    # Forbidden
    NOTIFICATION_NOT_OWNED_BY_USER = "NOTIFICATION_NOT_OWNED_BY_USER"

    # Internal
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AgoraError(Exception):
    """Base class for every caller-visible failure."""

    kind: ClassVar[ErrorKind] = ErrorKind.INTERNAL

    def __init__(self, code: ErrorCode, detail: str | None = None) -> None:
        self.code = code
        self.detail = detail or code.value
        super().__init__(self.detail)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.value!r}, {self.detail!r})"


class InvalidInputError(AgoraError, ValueError):
    """Blank, too-short or too-long fields and malformed arguments."""

    kind = ErrorKind.VALIDATION


class NotFoundError(AgoraError, LookupError):
    """A referenced post, comment, user, actor, notification or version is missing."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(AgoraError):
    """The requested transition is not allowed from the entity's current state."""

    kind = ErrorKind.STATE_CONFLICT


class ForbiddenError(AgoraError):
    """The caller does not own the resource it tried to change."""

    kind = ErrorKind.FORBIDDEN


class InternalError(AgoraError):
    """Anything unclassified; surfaced to callers generically."""

    kind = ErrorKind.INTERNAL
