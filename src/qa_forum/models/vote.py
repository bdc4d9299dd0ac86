# src/qa_forum/models/vote.py
"""Models capturing voting interactions on questions and answers."""

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from qa_forum.db.session import Base

ITEM_TYPE_QUESTION = "question"
ITEM_TYPE_ANSWER = "answer"


class ContentVote(Base):
    """Per-account vote on a question or an answer.

    The upvoter and downvoter sets of an item are the rows with direction 1
    and -1 respectively. The composite primary key allows one row per
    account and item, so an account is never in both sets.
    """

    __tablename__ = "content_vote"
    __table_args__ = (
        CheckConstraint("direction IN (1, -1)", name="ck_content_vote_direction"),
        CheckConstraint(
            "item_type IN ('question', 'answer')",
            name="ck_content_vote_item_type",
        ),
        Index("ix_content_vote_item", "item_type", "item_id"),
    )

    item_type: Mapped[str] = mapped_column(String(16), primary_key=True)
    item_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    voter_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("account.id"),
        primary_key=True,
    )

    # 1 = upvote, -1 = downvote.
    direction: Mapped[int] = mapped_column(SmallInteger, nullable=False)
