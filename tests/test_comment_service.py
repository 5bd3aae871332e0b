# tests/test_comment_service.py
"""Tests for comment use cases and their notification fan-out."""

import pytest

from agora_stage.core.errors import (
    ConflictError,
    ErrorCode,
    InvalidInputError,
    NotFoundError,
)
from agora_stage.models import Comment, CommentRef, NotificationType
from agora_stage.schemas.comment import CommentCreate


def _comment(comment_service, post, author_id: str, content: str = "Great question", parent_id=None):
    return comment_service.create_comment(
        CommentCreate(post_id=post.id, author_id=author_id, content=content, parent_id=parent_id)
    )


def _kinds(notifications):
    return [(n.user_id, n.type) for n in notifications]


def _for_comment(all_notifications, comment_id: str):
    return [n for n in all_notifications() if n.link_url.endswith(f"#comment-{comment_id}")]


def test_top_level_comment_mentions_and_notifies_post_author(
    comment_service, post, all_notifications, db_session
) -> None:
    comment = _comment(comment_service, post, "u1", "@[u2:Bob] thanks")

    notifications = _for_comment(all_notifications, comment.id)
    assert _kinds(notifications) == [
        ("u2", NotificationType.MENTION),
        ("u3", NotificationType.COMMENT_ON_POST),
    ]
    assert notifications[0].message == "You were mentioned in a comment"
    assert notifications[1].message == "Someone commented on your post"
    assert notifications[1].link_url == f"/communities/c1/posts/{post.id}#comment-{comment.id}"
    assert {n.actor_id for n in notifications} == {"u1"}

    db_session.refresh(post)
    assert post.comment_count == 1


def test_post_author_commenting_gets_no_self_notification(
    comment_service, post, all_notifications
) -> None:
    comment = _comment(comment_service, post, "u3", "@[u2:Bob] thanks")

    assert _kinds(_for_comment(all_notifications, comment.id)) == [("u2", NotificationType.MENTION)]


def test_self_mention_is_skipped(comment_service, post, all_notifications) -> None:
    comment = _comment(comment_service, post, "u1", "Note to self @[u1:Alice]")

    assert _kinds(_for_comment(all_notifications, comment.id)) == [
        ("u3", NotificationType.COMMENT_ON_POST)
    ]


def test_reply_notifies_parent_author_only(comment_service, post, all_notifications) -> None:
    parent = _comment(comment_service, post, "u2")
    reply = _comment(comment_service, post, "u1", "I had the same problem", parent_id=parent.id)

    notifications = _for_comment(all_notifications, reply.id)
    assert _kinds(notifications) == [("u2", NotificationType.REPLY)]
    assert notifications[0].message == "Someone replied to your comment"


def test_reply_by_parent_author_notifies_nobody(comment_service, post, all_notifications) -> None:
    parent = _comment(comment_service, post, "u2")
    reply = _comment(comment_service, post, "u2", "Following up on myself", parent_id=parent.id)

    assert _for_comment(all_notifications, reply.id) == []


def test_reply_mentions_come_before_reply_notification(comment_service, post, all_notifications) -> None:
    parent = _comment(comment_service, post, "u2")
    reply = _comment(comment_service, post, "u1", "cc @[u3:Carol]", parent_id=parent.id)

    assert _kinds(_for_comment(all_notifications, reply.id)) == [
        ("u3", NotificationType.MENTION),
        ("u2", NotificationType.REPLY),
    ]


def test_reply_to_reply_exceeds_nesting_depth(comment_service, post, db_session) -> None:
    parent = _comment(comment_service, post, "u2")
    reply = _comment(comment_service, post, "u1", "First reply", parent_id=parent.id)
    db_session.refresh(post)
    comments_before = db_session.query(Comment).count()
    count_before = post.comment_count

    with pytest.raises(ConflictError) as excinfo:
        _comment(comment_service, post, "u3", "Too deep", parent_id=reply.id)

    assert excinfo.value.code is ErrorCode.MAX_NESTING_DEPTH_EXCEEDED
    db_session.refresh(post)
    assert db_session.query(Comment).count() == comments_before
    assert post.comment_count == count_before == 2


@pytest.mark.parametrize(
    ("setup", "code", "error"),
    [
        ("missing_parent", ErrorCode.PARENT_COMMENT_NOT_FOUND, NotFoundError),
        ("archived_parent", ErrorCode.CANNOT_REPLY_TO_ARCHIVED_COMMENT, ConflictError),
        ("other_post_parent", ErrorCode.PARENT_ON_DIFFERENT_POST, ConflictError),
    ],
)
def test_invalid_parents_are_rejected(
    comment_service, post, make_post, db_session, setup, code, error
) -> None:
    if setup == "missing_parent":
        parent_id = "ghost"
    elif setup == "archived_parent":
        parent_id = _comment(comment_service, post, "u2").id
        comment_service.archive_comment(parent_id)
    else:
        other = make_post("u2")
        parent_id = _comment(comment_service, other, "u2").id
    db_session.refresh(post)
    count_before = post.comment_count

    with pytest.raises(error) as excinfo:
        _comment(comment_service, post, "u1", "Reply", parent_id=parent_id)

    assert excinfo.value.code is code
    db_session.refresh(post)
    assert post.comment_count == count_before


def test_comment_on_missing_or_archived_post(comment_service, post, post_service) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        comment_service.create_comment(CommentCreate(post_id="ghost", author_id="u1", content="Hi"))
    assert excinfo.value.code is ErrorCode.POST_NOT_FOUND

    post_service.archive_post(post.id)
    with pytest.raises(ConflictError) as excinfo:
        _comment(comment_service, post, "u1")
    assert excinfo.value.code is ErrorCode.CANNOT_COMMENT_ON_ARCHIVED_POST


def test_blank_comment_is_rejected(comment_service, post) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        _comment(comment_service, post, "u1", "   ")
    assert excinfo.value.code is ErrorCode.INVALID_CONTENT


def test_archive_and_restore_adjust_post_comment_count(comment_service, post, db_session) -> None:
    comment = _comment(comment_service, post, "u1")
    db_session.refresh(post)
    assert post.comment_count == 1

    comment_service.archive_comment(comment.id)
    db_session.refresh(post)
    assert post.comment_count == 0
    with pytest.raises(NotFoundError):
        comment_service.get_comment(comment.id)
    with pytest.raises(ConflictError) as excinfo:
        comment_service.archive_comment(comment.id)
    assert excinfo.value.code is ErrorCode.COMMENT_ALREADY_ARCHIVED

    comment_service.restore_comment(comment.id)
    db_session.refresh(post)
    assert post.comment_count == 1


def test_update_comment_appends_version(comment_service, version_service, post) -> None:
    comment = _comment(comment_service, post, "u1", "First draft")
    comment_service.update_comment(comment.id, "First draft")
    updated = comment_service.update_comment(comment.id, "Second draft @[u2:Bob]")

    assert updated.mentioned_user_ids == ["u2"]
    history = version_service.get_history(CommentRef(comment.id))
    assert [(v.version_number, v.content) for v in history] == [
        (1, "First draft"),
        (2, "Second draft @[u2:Bob]"),
    ]


def test_comment_counters(comment_service, post) -> None:
    comment = _comment(comment_service, post, "u1")
    comment_service.like_comment(comment.id, "u2")
    result = comment_service.mark_comment_helpful(comment.id)
    assert (result.like_count, result.helpful_count) == (1, 1)


def test_like_comment_once_per_member(comment_service, post) -> None:
    comment = _comment(comment_service, post, "u1")
    comment_service.like_comment(comment.id, "u2")

    with pytest.raises(ConflictError) as excinfo:
        comment_service.like_comment(comment.id, "u2")
    assert excinfo.value.code is ErrorCode.ALREADY_LIKED
    with pytest.raises(NotFoundError) as excinfo:
        comment_service.like_comment(comment.id, "ghost")
    assert excinfo.value.code is ErrorCode.USER_NOT_FOUND

    assert comment_service.like_comment(comment.id, "u3").like_count == 2


def test_list_comments_groups_replies_under_parents(comment_service, post) -> None:
    first = _comment(comment_service, post, "u1", "First")
    second = _comment(comment_service, post, "u2", "Second")
    reply = _comment(comment_service, post, "u3", "Reply to first", parent_id=first.id)
    hidden = _comment(comment_service, post, "u3", "Will be archived", parent_id=second.id)
    comment_service.archive_comment(hidden.id)

    threads = comment_service.list_comments(post.id)

    assert [t.comment.id for t in threads] == [first.id, second.id]
    assert [r.id for r in threads[0].replies] == [reply.id]
    assert threads[1].replies == []
