# src/qa_forum/models/account.py
"""SQLAlchemy model for registered accounts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from qa_forum.db.session import Base
from qa_forum.db.time import utcnow

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLE_MASTER = "master"
MODERATOR_ROLES = frozenset({ROLE_ADMIN, ROLE_MASTER})


class Account(Base):
    """Stable, authenticated identity.

    Accounts are never hard-deleted so that authored content keeps a valid
    ``real_author_id``. Reputation and the contribution counters are only
    changed through the reputation ledger.
    """

    __tablename__ = "account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_USER)

    reputation: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    questions_asked: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    answers_given: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    accepted_answers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Moderation state; the window is [suspended_from, suspended_until).
    is_banned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    suspended_from: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    suspended_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    suspension_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    @property
    def is_moderator(self) -> bool:
        """Return True for roles allowed to edit or delete any content."""
        return self.role in MODERATOR_ROLES

    @property
    def name(self) -> str:
        """Return the name shown in notification messages."""
        return self.display_name or self.username
