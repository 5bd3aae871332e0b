# tests/test_comment_model.py
"""Tests for comment validation and lifecycle transitions."""

import pytest

from agora_stage.core.errors import ConflictError, ErrorCode, InvalidInputError
from agora_stage.models import Comment, CommentRef, ContentType


def _comment(**overrides) -> Comment:
    fields = {"id": "cm1", "post_id": "p1", "author_id": "u1", "content": "Nice post @[u2:Bob]"}
    fields.update(overrides)
    return Comment.create(**fields)


def test_create_top_level_and_reply() -> None:
    top = _comment()
    reply = _comment(id="cm2", parent_id="cm1", content="Agreed")

    assert top.is_top_level and not top.is_reply
    assert reply.is_reply and reply.parent_id == "cm1"
    assert top.mentioned_user_ids == ["u2"]
    assert (top.like_count, top.helpful_count) == (0, 0)


@pytest.mark.parametrize(
    ("content", "code"),
    [
        ("", ErrorCode.INVALID_CONTENT),
        ("   ", ErrorCode.INVALID_CONTENT),
        ("<p></p>", ErrorCode.CONTENT_TOO_SHORT),
    ],
)
def test_create_rejects_empty_content(content: str, code: ErrorCode) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        _comment(content=content)
    assert excinfo.value.code is code


def test_single_visible_character_is_enough() -> None:
    assert _comment(content="<b>k</b>").content == "<b>k</b>"


def test_update_reports_change() -> None:
    comment = _comment()
    assert comment.update("Edited @[u3:Carol]") is True
    assert comment.mentioned_user_ids == ["u3"]
    assert comment.update("Edited @[u3:Carol]") is False


def test_archived_comment_cannot_be_updated() -> None:
    comment = _comment()
    comment.archive()
    with pytest.raises(ConflictError) as excinfo:
        comment.update("Sneaky edit")
    assert excinfo.value.code is ErrorCode.CANNOT_MODIFY_ARCHIVED_COMMENT
    assert comment.content == "Nice post @[u2:Bob]"


def test_archive_and_restore_are_mutually_exclusive() -> None:
    comment = _comment()
    with pytest.raises(ConflictError) as excinfo:
        comment.restore()
    assert excinfo.value.code is ErrorCode.COMMENT_NOT_ARCHIVED

    comment.archive()
    with pytest.raises(ConflictError) as excinfo:
        comment.archive()
    assert excinfo.value.code is ErrorCode.COMMENT_ALREADY_ARCHIVED

    comment.restore()
    assert not comment.is_archived


def test_counters() -> None:
    comment = _comment()
    comment.increment_like_count()
    comment.increment_like_count()
    comment.increment_helpful_count()
    assert (comment.like_count, comment.helpful_count) == (2, 1)


def test_snapshot_refers_to_comment() -> None:
    version = _comment().create_version_snapshot(1, version_id="v1")
    assert version.ref == CommentRef("cm1")
    assert version.content_type is ContentType.COMMENT
    assert version.is_comment_version and not version.is_post_version
