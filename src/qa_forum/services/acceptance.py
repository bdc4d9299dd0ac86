"""Answer acceptance state machine."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from qa_forum.core.errors import ForbiddenError, NotFoundError
from qa_forum.models import Answer, Question
from qa_forum.services.identity import Actor, AuthenticatedActor
from qa_forum.services.notifications import NotificationFanout, get_notification_fanout
from qa_forum.services.reputation import ReputationLedger, get_reputation_ledger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcceptanceResult:
    """Outcome of one acceptance toggle."""

    answer_id: int
    question_id: int
    is_accepted: bool
    question_is_accepted: bool


def recompute_question_acceptance(db: Session, question_id: int) -> bool:
    """Derive ``question.is_accepted`` from its answers and store it.

    The flag is recomputed from the authoritative answer rows on every
    transition instead of being tracked incrementally.
    """
    accepted = db.execute(
        select(func.count())
        .select_from(Answer)
        .where(Answer.question_id == question_id, Answer.is_accepted.is_(True))
    ).scalar_one()
    is_accepted = accepted > 0
    db.execute(
        update(Question).where(Question.id == question_id).values(is_accepted=is_accepted)
    )
    return is_accepted


class AcceptanceService:
    """Toggles ``Unaccepted <-> Accepted`` for answers.

    Several answers of one question may be accepted at once. Accepting
    counts one more accepted answer for the answering account; unaccepting
    never takes it back.
    """

    def __init__(
        self,
        ledger: ReputationLedger | None = None,
        fanout: NotificationFanout | None = None,
    ) -> None:
        self.ledger = ledger or get_reputation_ledger()
        self.fanout = fanout or get_notification_fanout()

    def toggle(self, db: Session, actor: Actor, answer_id: int) -> AcceptanceResult:
        """Flip the acceptance flag of an answer.

        Args:
            db: Database session
            actor: Requesting actor; must be the question's real author
            answer_id: Answer to toggle

        Returns:
            AcceptanceResult with the new answer and question flags

        Raises:
            NotFoundError: If the answer or its question does not exist
            ForbiddenError: If the actor is not the question's author
        """
        question_id = db.execute(
            select(Answer.question_id).where(Answer.id == answer_id)
        ).scalar_one_or_none()
        if question_id is None:
            raise NotFoundError("Answer not found")

        # Lock the question before reading the answer flag so concurrent
        # toggles of its answers run one after another.
        question = db.execute(
            select(Question).where(Question.id == question_id).with_for_update()
        ).scalar_one_or_none()
        if question is None:
            raise NotFoundError("Question not found")
        answer = db.execute(
            select(Answer)
            .where(Answer.id == answer_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if answer is None:
            raise NotFoundError("Answer not found")

        if isinstance(actor, AuthenticatedActor):
            if question.real_author_id != actor.account_id:
                raise ForbiddenError("Only the question author can accept answers")
        else:
            raise ForbiddenError("Only the question author can accept answers")

        new_status = not answer.is_accepted
        db.execute(update(Answer).where(Answer.id == answer.id).values(is_accepted=new_status))
        question_is_accepted = recompute_question_acceptance(db, question.id)

        answering_account_id = answer.real_author_id
        # Anonymous answers have no public author to notify.
        recipient_id = answer.author_id
        if new_status and answering_account_id is not None:
            self.ledger.answer_accepted(db, answering_account_id)

        db.commit()
        logger.info(
            "Answer %s %s by account %s",
            answer.id,
            "accepted" if new_status else "unaccepted",
            actor.account_id,
        )

        if new_status:
            self.fanout.notify(
                db,
                recipient_id=recipient_id,
                sender_id=actor.account_id,
                type="accept",
                title="Your answer was accepted!",
                message=(
                    f'Your answer to "{question.title}" was accepted by the question author.'
                ),
                related_question_id=question.id,
                related_answer_id=answer.id,
            )

        return AcceptanceResult(
            answer_id=answer.id,
            question_id=question.id,
            is_accepted=new_status,
            question_is_accepted=question_is_accepted,
        )


def get_acceptance_service() -> AcceptanceService:
    """Return an acceptance service wired to the shared collaborators."""
    return AcceptanceService()
