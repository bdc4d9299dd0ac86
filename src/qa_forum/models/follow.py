# src/qa_forum/models/follow.py
"""Follow graph edges and pending follow requests."""

from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from qa_forum.db.session import Base


class AccountFollow(Base):
    """Directed edge: ``follower_id`` follows ``followee_id``."""

    __tablename__ = "account_follow"

    follower_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("account.id"), primary_key=True
    )
    followee_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("account.id"), primary_key=True
    )


class FollowRequest(Base):
    """Pending request to follow a private account."""

    __tablename__ = "follow_request"

    requester_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("account.id"), primary_key=True
    )
    target_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("account.id"), primary_key=True
    )
