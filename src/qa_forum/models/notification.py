# src/qa_forum/models/notification.py
"""Durable notification records."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from qa_forum.db.session import Base
from qa_forum.db.time import utcnow

NOTIFICATION_TYPES = (
    "answer",
    "comment",
    "mention",
    "vote",
    "accept",
    "admin",
    "follow",
    "follow_request",
    "follow_accept",
)


class Notification(Base):
    """A message to one account about one triggering event.

    Rows are created once and only ``is_read`` changes afterwards. The
    related ids are plain integers so that deleting content does not
    cascade into a recipient's history.
    """

    __tablename__ = "notification"
    __table_args__ = (Index("ix_notification_recipient", "recipient_id", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipient_id: Mapped[int] = mapped_column(Integer, ForeignKey("account.id"), nullable=False)
    sender_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("account.id"), nullable=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    related_question_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    related_answer_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    related_user_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
