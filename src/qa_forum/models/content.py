# src/qa_forum/models/content.py
"""SQLAlchemy models for questions and answers."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from qa_forum.db.time import utcnow
from qa_forum.db.session import Base


class _AuthoredMixin:
    """Authorship columns shared by questions and answers.

    ``author_id`` is set for content posted under an account, and
    ``anonymous_token`` for content posted with a client-held token. Both
    are NULL for anonymous posts shown only under a display name.
    ``real_author_id`` always names the posting account.
    """

    author_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("account.id"), nullable=True
    )
    anonymous_token: Mapped[str | None] = mapped_column(String(128), nullable=True)
    anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    anonymous_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    real_author_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("account.id"), nullable=True
    )

    # Uploaded image references: {url, public_id, width, height, format}.
    images: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class Question(_AuthoredMixin, Base):
    """A question asked by an account."""

    __tablename__ = "question"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    short_description: Mapped[str] = mapped_column(String(200), nullable=False)
    tag_rows: Mapped[list[QuestionTag]] = relationship(
        "QuestionTag",
        cascade="all, delete-orphan",
        order_by="QuestionTag.position",
        lazy="selectin",
    )

    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Number of live answers; maintained with atomic increments.
    answers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # True iff at least one live answer is accepted; always recomputed.
    is_accepted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    @property
    def tags(self) -> list[str]:
        return [row.name for row in self.tag_rows]

    def set_tags(self, tags: list[str]) -> None:
        """Replace the tag set, keeping the given order."""
        self.tag_rows = [QuestionTag(name=name, position=index) for index, name in enumerate(tags)]


class QuestionTag(Base):
    """One tag of a question; kept in its own table so lists can filter by tag."""

    __tablename__ = "question_tag"
    __table_args__ = (Index("ix_question_tag_name", "name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("question.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Answer(_AuthoredMixin, Base):
    """An answer to a question."""

    __tablename__ = "answer"
    __table_args__ = (Index("ix_answer_question_id", "question_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("question.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_accepted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
