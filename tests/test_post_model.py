# tests/test_post_model.py
"""Tests for post validation and lifecycle transitions."""

import pytest

from agora_stage.core.errors import ConflictError, ErrorCode, InvalidInputError
from agora_stage.models import ContentType, Post, PostRef

CONTENT = "<p>This is a <strong>long enough</strong> body</p>"


def _post(**overrides) -> Post:
    fields = {
        "id": "p1",
        "community_id": "c1",
        "author_id": "u1",
        "title": "A good title",
        "content": CONTENT,
    }
    fields.update(overrides)
    return Post.create(**fields)


def _published() -> Post:
    post = _post()
    post.publish()
    return post


def test_create_starts_as_active_draft() -> None:
    post = _post(title="  Padded title  ", content='@[u2:Bob] <span data-mention-id="u3">x</span> hello')

    assert post.is_draft and not post.is_published
    assert not post.is_archived
    assert post.title == "Padded title"
    assert post.mentioned_user_ids == ["u2", "u3"]
    assert (post.like_count, post.helpful_count, post.comment_count, post.view_count) == (0, 0, 0, 0)
    assert post.created_at == post.updated_at


@pytest.mark.parametrize(
    ("title", "code"),
    [
        ("", ErrorCode.INVALID_TITLE),
        ("   ", ErrorCode.INVALID_TITLE),
        (" ab ", ErrorCode.TITLE_TOO_SHORT),
        ("x" * 201, ErrorCode.TITLE_TOO_LONG),
    ],
)
def test_create_rejects_bad_titles(title: str, code: ErrorCode) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        _post(title=title)
    assert excinfo.value.code is code


def test_title_bounds_are_inclusive() -> None:
    assert _post(title="abc").title == "abc"
    assert len(_post(title="y" * 200).title) == 200


@pytest.mark.parametrize(
    ("content", "code"),
    [
        ("", ErrorCode.INVALID_CONTENT),
        ("  ", ErrorCode.INVALID_CONTENT),
        ("<p><b>short</b></p>", ErrorCode.CONTENT_TOO_SHORT),
    ],
)
def test_create_rejects_bad_content(content: str, code: ErrorCode) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        _post(content=content)
    assert excinfo.value.code is code


def test_update_content_reextracts_mentions_and_reports_change() -> None:
    post = _post()
    assert post.update(content="Now mentioning @[u4:Dan] here") is True
    assert post.mentioned_user_ids == ["u4"]
    assert post.update(title="Another title") is False
    assert post.update(content=post.content) is False


def test_update_validates_everything_before_applying() -> None:
    post = _post()
    with pytest.raises(InvalidInputError):
        post.update(title="New valid title", content="tiny")
    assert post.title == "A good title"
    assert post.content == CONTENT


def test_publish_is_one_way() -> None:
    post = _published()
    assert post.is_published
    assert post.published_at is not None
    with pytest.raises(ConflictError) as excinfo:
        post.publish()
    assert excinfo.value.code is ErrorCode.POST_ALREADY_PUBLISHED


def test_pin_and_solve_require_published() -> None:
    post = _post()
    for action in (post.pin, post.mark_solved):
        with pytest.raises(ConflictError) as excinfo:
            action()
        assert excinfo.value.code is ErrorCode.POST_NOT_PUBLISHED


def test_pin_unpin_cycle() -> None:
    post = _published()
    post.pin()
    assert post.is_pinned
    with pytest.raises(ConflictError) as excinfo:
        post.pin()
    assert excinfo.value.code is ErrorCode.POST_ALREADY_PINNED

    post.unpin()
    assert not post.is_pinned
    with pytest.raises(ConflictError) as excinfo:
        post.unpin()
    assert excinfo.value.code is ErrorCode.POST_NOT_PINNED


def test_solve_unsolve_cycle() -> None:
    post = _published()
    post.mark_solved()
    assert post.is_solved
    with pytest.raises(ConflictError) as excinfo:
        post.mark_solved()
    assert excinfo.value.code is ErrorCode.POST_ALREADY_SOLVED

    post.mark_unsolved()
    assert not post.is_solved
    with pytest.raises(ConflictError) as excinfo:
        post.mark_unsolved()
    assert excinfo.value.code is ErrorCode.POST_NOT_SOLVED


def test_archived_post_rejects_mutation_and_keeps_fields() -> None:
    post = _published()
    post.pin()
    post.mark_solved()
    post.archive()
    before = (post.title, post.content, post.is_pinned, post.is_solved, post.updated_at, post.deleted_at)

    for action in (
        lambda: post.update(title="Changed title"),
        post.pin,
        post.unpin,
        post.mark_solved,
        post.mark_unsolved,
    ):
        with pytest.raises(ConflictError) as excinfo:
            action()
        assert excinfo.value.code is ErrorCode.CANNOT_MODIFY_ARCHIVED_POST

    with pytest.raises(ConflictError) as excinfo:
        post.archive()
    assert excinfo.value.code is ErrorCode.POST_ALREADY_ARCHIVED

    after = (post.title, post.content, post.is_pinned, post.is_solved, post.updated_at, post.deleted_at)
    assert after == before


def test_restore_returns_to_active() -> None:
    post = _post()
    with pytest.raises(ConflictError) as excinfo:
        post.restore()
    assert excinfo.value.code is ErrorCode.POST_NOT_ARCHIVED

    post.archive()
    post.restore()
    assert not post.is_archived
    assert post.update(content="Editable again after restoring") is True


def test_counters_only_comment_count_decrements_and_floors_at_zero() -> None:
    post = _post()
    post.increment_like_count()
    post.increment_helpful_count()
    post.increment_view_count()
    post.increment_comment_count()
    assert (post.like_count, post.helpful_count, post.view_count, post.comment_count) == (1, 1, 1, 1)

    post.decrement_comment_count()
    post.decrement_comment_count()
    assert post.comment_count == 0


def test_counters_still_move_on_archived_post() -> None:
    post = _post()
    post.archive()
    post.increment_like_count()
    assert post.like_count == 1


def test_version_snapshots_carry_current_content() -> None:
    post = _post()
    first = post.create_version_snapshot(1, version_id="v1")
    post.update(content="Completely rewritten content")
    second = post.create_version_snapshot(2, version_id="v2")

    assert first.ref == PostRef("p1")
    assert first.content_type is ContentType.POST
    assert (first.version_number, first.content) == (1, CONTENT)
    assert (second.version_number, second.content) == (2, "Completely rewritten content")
