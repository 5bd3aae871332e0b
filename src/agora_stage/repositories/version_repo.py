"""Data access helpers for content version history."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from agora_stage.models.content_version import ContentRef, ContentVersion

__all__ = ["ContentVersionRepository"]


class ContentVersionRepository:
    """Append-only store of content snapshots.

    There is no update or archive operation: versions are permanent.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, version: ContentVersion) -> ContentVersion:
        self.session.add(version)
        self.session.flush()
        return version

    def list_for(self, ref: ContentRef) -> list[ContentVersion]:
        """Return every version of ``ref`` in ascending version order."""
        stmt = (
            select(ContentVersion)
            .where(
                ContentVersion.content_type == ref.content_type,
                ContentVersion.content_id == ref.id,
            )
            .order_by(ContentVersion.version_number)
        )
        return list(self.session.execute(stmt).scalars())

    def get(self, ref: ContentRef, version_number: int) -> ContentVersion | None:
        stmt = select(ContentVersion).where(
            ContentVersion.content_type == ref.content_type,
            ContentVersion.content_id == ref.id,
            ContentVersion.version_number == version_number,
        )
        return self.session.execute(stmt).scalars().first()

    def get_latest(self, ref: ContentRef) -> ContentVersion | None:
        stmt = (
            select(ContentVersion)
            .where(
                ContentVersion.content_type == ref.content_type,
                ContentVersion.content_id == ref.id,
            )
            .order_by(ContentVersion.version_number.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

    def next_version_number(self, ref: ContentRef) -> int:
        """Return latest + 1, or 1 for content that has no history yet.

        Only race-free when called in the same transaction that mutates the
        content; the unique constraint on the table rejects duplicates.
        """
        latest = self.get_latest(ref)
        return latest.version_number + 1 if latest is not None else 1
