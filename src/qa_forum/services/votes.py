"""Vote ledger for questions and answers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Final

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from qa_forum.core.errors import ConflictError, NotFoundError, ValidationFailedError
from qa_forum.models import ITEM_TYPE_ANSWER, ITEM_TYPE_QUESTION, Answer, ContentVote, Question

logger = logging.getLogger(__name__)

UPVOTE: Final[int] = 1
DOWNVOTE: Final[int] = -1

_ITEM_MODELS: Final[dict[str, type[Question] | type[Answer]]] = {
    ITEM_TYPE_QUESTION: Question,
    ITEM_TYPE_ANSWER: Answer,
}


@dataclass(frozen=True)
class VoteTally:
    """Upvoter and downvoter sets of one item."""

    upvotes: list[int] = field(default_factory=list)
    downvotes: list[int] = field(default_factory=list)

    @property
    def upvote_count(self) -> int:
        return len(self.upvotes)

    @property
    def downvote_count(self) -> int:
        return len(self.downvotes)

    @property
    def score(self) -> int:
        return self.upvote_count - self.downvote_count


def _vote_key(item_type: str, item_id: int, voter_id: int) -> tuple[object, ...]:
    return (
        ContentVote.item_type == item_type,
        ContentVote.item_id == item_id,
        ContentVote.voter_id == voter_id,
    )


class VoteLedger:
    """Maintains one vote per account per item with toggle semantics.

    Each call issues exactly one conditional row statement, so two accounts
    voting on the same item never overwrite each other's membership.
    Votes are ranking signals only and never touch reputation.
    """

    def ensure_item_exists(self, db: Session, item_type: str, item_id: int) -> None:
        """Raise NotFoundError unless the item exists."""
        model = _ITEM_MODELS.get(item_type)
        if model is None:
            raise ValidationFailedError(f"Unknown item type: {item_type}")
        if db.get(model, item_id) is None:
            raise NotFoundError(f"{item_type.capitalize()} not found")

    def apply_vote(
        self,
        db: Session,
        item_type: str,
        item_id: int,
        voter_id: int,
        direction: int,
    ) -> VoteTally:
        """Toggle ``voter_id``'s vote on an item and return the new tally.

        Same direction as the current vote removes it, the opposite
        direction flips it, and no current vote adds one.

        Raises:
            ValidationFailedError: If the direction or item type is invalid
            NotFoundError: If the item does not exist
            ConflictError: If a concurrent vote by the same account won the insert
        """
        if direction not in (UPVOTE, DOWNVOTE):
            raise ValidationFailedError("Vote direction must be upvote or downvote")
        self.ensure_item_exists(db, item_type, item_id)

        key = _vote_key(item_type, item_id, voter_id)
        current = db.execute(select(ContentVote.direction).where(*key)).scalar_one_or_none()

        if current == direction:
            db.execute(delete(ContentVote).where(*key, ContentVote.direction == direction))
            action = "removed"
        elif current == -direction:
            db.execute(
                update(ContentVote)
                .where(*key, ContentVote.direction == -direction)
                .values(direction=direction)
            )
            action = "flipped"
        else:
            try:
                db.execute(
                    insert(ContentVote).values(
                        item_type=item_type,
                        item_id=item_id,
                        voter_id=voter_id,
                        direction=direction,
                    )
                )
            except IntegrityError as exc:
                # A concurrent request from the same account inserted first.
                db.rollback()
                raise ConflictError("Vote was changed concurrently, please retry") from exc
            action = "added"

        db.commit()
        logger.debug(
            "Vote %s on %s %s by account %s (direction=%d)",
            action,
            item_type,
            item_id,
            voter_id,
            direction,
        )
        return self.get_tally(db, item_type, item_id)

    def get_tally(self, db: Session, item_type: str, item_id: int) -> VoteTally:
        """Return the current upvoter and downvoter sets of an item."""
        rows = db.execute(
            select(ContentVote.voter_id, ContentVote.direction)
            .where(ContentVote.item_type == item_type, ContentVote.item_id == item_id)
            .order_by(ContentVote.voter_id)
        ).all()
        return VoteTally(
            upvotes=[voter for voter, vote in rows if vote == UPVOTE],
            downvotes=[voter for voter, vote in rows if vote == DOWNVOTE],
        )

    def get_vote_direction(
        self, db: Session, item_type: str, item_id: int, voter_id: int
    ) -> int:
        """Return 1, -1 or 0 for the account's current vote on an item."""
        current = db.execute(
            select(ContentVote.direction).where(*_vote_key(item_type, item_id, voter_id))
        ).scalar_one_or_none()
        return int(current or 0)

    def clear_items(self, db: Session, item_type: str, item_ids: list[int]) -> None:
        """Delete every vote on the given items; the caller owns the commit."""
        if not item_ids:
            return
        db.execute(
            delete(ContentVote).where(
                ContentVote.item_type == item_type,
                ContentVote.item_id.in_(item_ids),
            )
        )


def get_vote_ledger() -> VoteLedger:
    """Return a vote ledger instance."""
    return VoteLedger()
