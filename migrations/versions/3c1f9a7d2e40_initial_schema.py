"""initial schema

Revision ID: 3c1f9a7d2e40
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1f9a7d2e40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _authored_columns() -> list[sa.Column]:
    return [
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=True),
        sa.Column("anonymous_token", sa.String(length=128), nullable=True),
        sa.Column("anonymous", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("anonymous_name", sa.String(length=50), nullable=True),
        sa.Column("real_author_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=True),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create the forum tables."""
    op.create_table(
        "account",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(length=30), nullable=False, unique=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("display_name", sa.String(length=50), nullable=True),
        sa.Column("role", sa.String(length=16), nullable=False, server_default="user"),
        sa.Column("reputation", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("questions_asked", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("answers_given", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("accepted_answers", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_banned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("suspended_from", sa.DateTime(timezone=True), nullable=True),
        sa.Column("suspended_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("suspension_reason", sa.Text(), nullable=True),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "question",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("short_description", sa.String(length=200), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("answers", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_accepted", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_authored_columns(),
    )
    op.create_table(
        "question_tag",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "question_id",
            sa.Integer(),
            sa.ForeignKey("question.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_question_tag_name", "question_tag", ["name"])
    op.create_table(
        "answer",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "question_id",
            sa.Integer(),
            sa.ForeignKey("question.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_accepted", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_authored_columns(),
    )
    op.create_index("ix_answer_question_id", "answer", ["question_id"])
    op.create_table(
        "content_vote",
        sa.Column("item_type", sa.String(length=16), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("voter_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=False),
        sa.Column("direction", sa.SmallInteger(), nullable=False),
        sa.PrimaryKeyConstraint("item_type", "item_id", "voter_id"),
        sa.CheckConstraint("direction IN (1, -1)", name="ck_content_vote_direction"),
        sa.CheckConstraint(
            "item_type IN ('question', 'answer')",
            name="ck_content_vote_item_type",
        ),
    )
    op.create_index("ix_content_vote_item", "content_vote", ["item_type", "item_id"])
    op.create_table(
        "notification",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("recipient_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=False),
        sa.Column("sender_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=True),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("related_question_id", sa.Integer(), nullable=True),
        sa.Column("related_answer_id", sa.Integer(), nullable=True),
        sa.Column("related_user_id", sa.Integer(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_notification_recipient", "notification", ["recipient_id", "created_at"]
    )
    op.create_table(
        "account_follow",
        sa.Column("follower_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=False),
        sa.Column("followee_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=False),
        sa.PrimaryKeyConstraint("follower_id", "followee_id"),
    )
    op.create_table(
        "follow_request",
        sa.Column("requester_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=False),
        sa.Column("target_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=False),
        sa.PrimaryKeyConstraint("requester_id", "target_id"),
    )


def downgrade() -> None:
    """Drop the forum tables."""
    op.drop_table("follow_request")
    op.drop_table("account_follow")
    op.drop_index("ix_notification_recipient", table_name="notification")
    op.drop_table("notification")
    op.drop_index("ix_content_vote_item", table_name="content_vote")
    op.drop_table("content_vote")
    op.drop_index("ix_answer_question_id", table_name="answer")
    op.drop_table("answer")
    op.drop_index("ix_question_tag_name", table_name="question_tag")
    op.drop_table("question_tag")
    op.drop_table("question")
    op.drop_table("account")
