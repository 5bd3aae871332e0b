"""likes and post drafts

Revision ID: 9d4e2a7c5b13
Revises: 6b1f0c2d9a41
Create Date: 2026-10-19 15:41:07.902113

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "9d4e2a7c5b13"
down_revision: Union[str, Sequence[str], None] = "6b1f0c2d9a41"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add per-user likes and autosaved post drafts."""
    op.create_table(
        "content_like",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("post_id", sa.String(length=36), nullable=True),
        sa.Column("comment_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "(post_id IS NULL) <> (comment_id IS NULL)",
            name="ck_like_single_target",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"]),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["comment_id"], ["comment.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "post_id", name="uq_like_user_post"),
        sa.UniqueConstraint("user_id", "comment_id", name="uq_like_user_comment"),
    )
    op.create_index("ix_content_like_user_id", "content_like", ["user_id"])

    op.create_table(
        "post_draft",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("post_id", sa.String(length=36), nullable=True),
        sa.Column("content", sa.JSON(), nullable=False),
        sa.Column("saved_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"]),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_post_draft_user_id", "post_draft", ["user_id"])
    op.create_index("ix_post_draft_expires_at", "post_draft", ["expires_at"])


def downgrade() -> None:
    """Drop likes and post drafts."""
    op.drop_index("ix_post_draft_expires_at", table_name="post_draft")
    op.drop_index("ix_post_draft_user_id", table_name="post_draft")
    op.drop_table("post_draft")
    op.drop_index("ix_content_like_user_id", table_name="content_like")
    op.drop_table("content_like")
