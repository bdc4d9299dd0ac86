"""Additive reputation and contribution counters."""

from __future__ import annotations

import logging
from typing import Final

from sqlalchemy import update
from sqlalchemy.orm import Session

from qa_forum.core.errors import NotFoundError
from qa_forum.core.settings import settings
from qa_forum.models import Account

logger = logging.getLogger(__name__)

REASON_QUESTION_CREATED: Final[str] = "question_created"
REASON_ANSWER_CREATED: Final[str] = "answer_created"
REASON_ANSWER_ACCEPTED: Final[str] = "answer_accepted"

COUNTERS: Final[frozenset[str]] = frozenset(
    {"questions_asked", "answers_given", "accepted_answers"}
)


class ReputationLedger:
    """Applies point deltas and counter bumps to accounts.

    Every award is a single ``UPDATE ... SET col = col + n`` so concurrent
    awards to one account never lose updates. Nothing here is reversible:
    unaccepting an answer does not call back into the ledger.
    """

    def award(
        self,
        db: Session,
        account_id: int,
        delta: int,
        reason: str,
        counter: str | None = None,
    ) -> None:
        """Add ``delta`` reputation and optionally bump one counter by one.

        Args:
            db: Database session; the caller owns the commit
            account_id: Account receiving the award
            delta: Reputation points to add (may be 0)
            reason: Machine-readable reason, used for logging
            counter: One of ``questions_asked``, ``answers_given``, ``accepted_answers``

        Raises:
            NotFoundError: If the account does not exist
            ValueError: If ``counter`` is not a known counter
        """
        values: dict[str, object] = {"reputation": Account.reputation + delta}
        if counter is not None:
            if counter not in COUNTERS:
                raise ValueError(f"Unknown reputation counter: {counter}")
            values[counter] = getattr(Account, counter) + 1

        result = db.execute(
            update(Account).where(Account.id == account_id).values(values)
        )
        if result.rowcount == 0:
            raise NotFoundError("User not found")

        logger.info(
            "Awarded %d reputation to account %s (%s, counter=%s)",
            delta,
            account_id,
            reason,
            counter,
        )

    def question_created(self, db: Session, account_id: int) -> int:
        """Apply the award for asking a question and return the points."""
        points = settings.reputation_question_points
        self.award(db, account_id, points, REASON_QUESTION_CREATED, counter="questions_asked")
        return points

    def answer_created(self, db: Session, account_id: int) -> int:
        """Apply the award for answering a question and return the points."""
        points = settings.reputation_answer_points
        self.award(db, account_id, points, REASON_ANSWER_CREATED, counter="answers_given")
        return points

    def answer_accepted(self, db: Session, account_id: int) -> None:
        """Count one more accepted answer; reputation itself is unchanged."""
        self.award(db, account_id, 0, REASON_ANSWER_ACCEPTED, counter="accepted_answers")


def get_reputation_ledger() -> ReputationLedger:
    """Return a reputation ledger instance."""
    return ReputationLedger()
