# tests/test_content_version.py
"""Tests for the immutable content version entity."""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agora_stage.core.errors import ConflictError, ErrorCode, InvalidInputError
from agora_stage.models import CommentRef, ContentType, ContentVersion, PostRef
from agora_stage.models.content_version import ref_for


def test_create_for_post_ref() -> None:
    version = ContentVersion.create(id="v1", ref=PostRef("p1"), content="Body", version_number=1)
    assert version.content_type is ContentType.POST
    assert version.content_id == "p1"
    assert version.ref == PostRef("p1")
    assert version.is_post_version


@pytest.mark.parametrize("number", [0, -3, True, 1.5, "2"])
def test_rejects_invalid_version_numbers(number) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        ContentVersion.create(id="v1", ref=PostRef("p1"), content="Body", version_number=number)
    assert excinfo.value.code is ErrorCode.INVALID_VERSION_NUMBER


@pytest.mark.parametrize("content", ["", "   "])
def test_rejects_empty_snapshot(content: str) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        ContentVersion.create(id="v1", ref=CommentRef("c1"), content=content, version_number=1)
    assert excinfo.value.code is ErrorCode.INVALID_SNAPSHOT


def test_rejects_unknown_reference() -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        ContentVersion.create(id="v1", ref="p1", content="Body", version_number=1)  # type: ignore[arg-type]
    assert excinfo.value.code is ErrorCode.UNKNOWN_CONTENT_TYPE


def test_fields_cannot_change_once_set() -> None:
    version = ContentVersion.create(id="v1", ref=PostRef("p1"), content="Body", version_number=1)
    with pytest.raises(ConflictError) as excinfo:
        version.content = "Rewritten history"
    assert excinfo.value.code is ErrorCode.VERSION_IMMUTABLE
    with pytest.raises(ConflictError):
        version.version_number = 2
    assert (version.content, version.version_number) == ("Body", 1)


def test_ref_for_maps_discriminator() -> None:
    assert ref_for("POST", "x") == PostRef("x")
    assert ref_for(ContentType.COMMENT, "y") == CommentRef("y")
    assert PostRef("x") != CommentRef("x")
    with pytest.raises(InvalidInputError) as excinfo:
        ref_for("LESSON", "z")
    assert excinfo.value.code is ErrorCode.UNKNOWN_CONTENT_TYPE


def test_duplicate_version_number_is_rejected_by_database(db_session: Session) -> None:
    db_session.add(ContentVersion.create(id="v1", ref=PostRef("p1"), content="A", version_number=1))
    db_session.flush()
    db_session.add(ContentVersion.create(id="v2", ref=PostRef("p1"), content="B", version_number=1))
    with pytest.raises(IntegrityError):
        db_session.flush()
    db_session.rollback()


def test_same_number_allowed_for_different_content(db_session: Session) -> None:
    db_session.add_all(
        [
            ContentVersion.create(id="v1", ref=PostRef("p1"), content="A", version_number=1),
            ContentVersion.create(id="v2", ref=CommentRef("p1"), content="B", version_number=1),
            ContentVersion.create(id="v3", ref=PostRef("p2"), content="C", version_number=1),
        ]
    )
    db_session.flush()
    assert db_session.query(ContentVersion).count() == 3
