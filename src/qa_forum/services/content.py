"""Question and answer lifecycle.

Creation awards reputation in the same transaction as the content row.
Uploaded images live outside the database, so any failure after they are
referenced is compensated by deleting them from the asset store.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Final

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from qa_forum.core.errors import (
    DependencyFailureError,
    ForumError,
    NotFoundError,
    ValidationFailedError,
)
from qa_forum.core.settings import settings
from qa_forum.models import (
    ITEM_TYPE_ANSWER,
    ITEM_TYPE_QUESTION,
    Account,
    Answer,
    ContentVote,
    Question,
    QuestionTag,
)
from qa_forum.schemas.content import AnswerCreate, AnswerUpdate, QuestionCreate, QuestionUpdate
from qa_forum.services.acceptance import recompute_question_acceptance
from qa_forum.services.assets import CloudinaryAssetStore, get_asset_store
from qa_forum.services.identity import Actor, authorize_modification, require_account
from qa_forum.services.notifications import NotificationFanout, get_notification_fanout
from qa_forum.services.reputation import ReputationLedger, get_reputation_ledger
from qa_forum.services.votes import UPVOTE, VoteLedger, get_vote_ledger

logger = logging.getLogger(__name__)

ANONYMOUS_NAME: Final[str] = "Anonymous"
QUESTION_FILTERS: Final[tuple[str, ...]] = ("all", "unanswered", "accepted", "upvoted")
QUESTION_SORTS: Final[tuple[str, ...]] = ("newest", "popular", "views", "votes")
MAX_PAGE_SIZE: Final[int] = 100


@dataclass(frozen=True)
class QuestionPage:
    """One page of a question listing."""

    questions: list[Question]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """Lower-case and trim tags, dropping blanks and duplicates."""
    seen: list[str] = []
    for tag in tags:
        name = tag.strip().lower()
        if name and name not in seen:
            seen.append(name)
    return seen


def _upvote_count(item_type: str, item_id_column: Any) -> Any:
    return (
        select(func.count())
        .select_from(ContentVote)
        .where(
            ContentVote.item_type == item_type,
            ContentVote.item_id == item_id_column,
            ContentVote.direction == UPVOTE,
        )
        .scalar_subquery()
    )


def _validate_title(title: str) -> str:
    title = title.strip()
    if not settings.question_title_min_length <= len(title) <= settings.question_title_max_length:
        raise ValidationFailedError(
            f"Title must be between {settings.question_title_min_length} and "
            f"{settings.question_title_max_length} characters"
        )
    return title


def _validate_question_content(content: str) -> str:
    content = content.strip()
    if len(content) < settings.question_content_min_length:
        raise ValidationFailedError(
            f"Content must be at least {settings.question_content_min_length} characters"
        )
    return content


def _validate_answer_content(content: str) -> str:
    content = content.strip()
    if len(content) < settings.answer_content_min_length:
        raise ValidationFailedError(
            f"Answer must be at least {settings.answer_content_min_length} characters"
        )
    return content


def _validate_short_description(short_description: str | None, content: str) -> str:
    limit = settings.short_description_max_length
    if short_description is None or not short_description.strip():
        return content[:limit]
    short_description = short_description.strip()
    if len(short_description) > limit:
        raise ValidationFailedError(f"Short description cannot exceed {limit} characters")
    return short_description


def _validate_tags(tags: Iterable[str]) -> list[str]:
    normalized = normalize_tags(tags)
    if not normalized:
        raise ValidationFailedError("At least one tag is required")
    return normalized


class ContentService:
    """Creates, edits, reads and deletes questions and answers."""

    def __init__(
        self,
        ledger: ReputationLedger | None = None,
        fanout: NotificationFanout | None = None,
        votes: VoteLedger | None = None,
        assets: CloudinaryAssetStore | None = None,
    ) -> None:
        self.ledger = ledger or get_reputation_ledger()
        self.fanout = fanout or get_notification_fanout()
        self.votes = votes or get_vote_ledger()
        self.assets = assets or get_asset_store()

    def _discard_images(self, images: list[Mapping[str, Any]]) -> None:
        if images and self.assets.enabled:
            self.assets.discard(images)

    def _abort_write(
        self, db: Session, images: list[dict[str, Any]], exc: Exception, noun: str
    ) -> DependencyFailureError | None:
        """Roll back, discard referenced images and map storage errors."""
        db.rollback()
        self._discard_images(images)
        if isinstance(exc, SQLAlchemyError):
            logger.error("Failed to save %s: %s", noun, exc, exc_info=True)
            return DependencyFailureError(f"Failed to save {noun}")
        return None

    def create_question(
        self, db: Session, actor: Actor, payload: QuestionCreate
    ) -> tuple[Question, int]:
        """Ask a question on behalf of an authenticated account.

        Args:
            db: Database session
            actor: Requesting actor; anonymous tokens cannot ask
            payload: Validated request body

        Returns:
            The stored question and the reputation it earned

        Raises:
            UnauthorizedError: If the actor has no account
            ValidationFailedError: If a field is out of bounds
            DependencyFailureError: If the database write fails
        """
        account = require_account(actor)
        images = [image.model_dump() for image in payload.images]
        try:
            title = _validate_title(payload.title)
            content = _validate_question_content(payload.content)
            question = Question(
                title=title,
                content=content,
                short_description=_validate_short_description(
                    payload.short_description, content
                ),
                images=images,
                real_author_id=account.account_id,
                views=0,
                answers=0,
                is_accepted=False,
                **self._authorship(account.account_id, payload.anonymous, payload),
            )
            question.set_tags(_validate_tags(payload.tags))
            db.add(question)
            db.flush()
            points = self.ledger.question_created(db, account.account_id)
            db.commit()
        except (SQLAlchemyError, ForumError) as exc:
            mapped = self._abort_write(db, images, exc, "question")
            if mapped is not None:
                raise mapped from exc
            raise

        db.refresh(question)
        logger.info(
            "Question %s created by account %s (anonymous=%s)",
            question.id,
            account.account_id,
            question.anonymous,
        )
        return question, points

    @staticmethod
    def _authorship(
        account_id: int, anonymous: bool, payload: QuestionCreate | AnswerCreate
    ) -> dict[str, Any]:
        if not anonymous:
            return {
                "author_id": account_id,
                "anonymous": False,
                "anonymous_token": None,
                "anonymous_name": None,
            }
        return {
            "author_id": None,
            "anonymous": True,
            "anonymous_token": payload.anon_user_id or None,
            "anonymous_name": (payload.anonymous_name or "").strip() or ANONYMOUS_NAME,
        }

    def create_answer(
        self, db: Session, actor: Actor, payload: AnswerCreate
    ) -> tuple[Answer, int]:
        """Answer a question and notify the question's author.

        Raises:
            UnauthorizedError: If the actor has no account
            ValidationFailedError: If the content is too short
            NotFoundError: If the question does not exist
            DependencyFailureError: If the database write fails
        """
        account = require_account(actor)
        images = [image.model_dump() for image in payload.images]
        try:
            content = _validate_answer_content(payload.content)
            question = db.get(Question, payload.question_id)
            if question is None:
                raise NotFoundError("Question not found")

            answer = Answer(
                question_id=question.id,
                content=content,
                images=images,
                real_author_id=account.account_id,
                is_accepted=False,
                **self._authorship(account.account_id, payload.anonymous, payload),
            )
            db.add(answer)
            db.flush()
            db.execute(
                update(Question)
                .where(Question.id == question.id)
                .values(answers=Question.answers + 1)
            )
            points = self.ledger.answer_created(db, account.account_id)
            db.commit()
        except (SQLAlchemyError, ForumError) as exc:
            mapped = self._abort_write(db, images, exc, "answer")
            if mapped is not None:
                raise mapped from exc
            raise

        db.refresh(answer)
        logger.info("Answer %s posted to question %s", answer.id, question.id)

        if question.real_author_id != account.account_id:
            if answer.anonymous:
                sender_id = None
                sender_name = answer.anonymous_name or ANONYMOUS_NAME
            else:
                sender_id = account.account_id
                sender = db.get(Account, account.account_id)
                sender_name = sender.name if sender is not None else "Someone"
            self.fanout.notify(
                db,
                recipient_id=question.real_author_id,
                sender_id=sender_id,
                type="answer",
                title="New answer to your question",
                message=f'{sender_name} answered your question: "{question.title}"',
                related_question_id=question.id,
                related_answer_id=answer.id,
            )
        return answer, points

    def _load_question(self, db: Session, question_id: int) -> Question:
        question = db.get(Question, question_id)
        if question is None:
            raise NotFoundError("Question not found")
        return question

    def _load_answer(self, db: Session, answer_id: int) -> Answer:
        answer = db.get(Answer, answer_id)
        if answer is None:
            raise NotFoundError("Answer not found")
        return answer

    def update_question(
        self, db: Session, actor: Actor, question_id: int, payload: QuestionUpdate
    ) -> Question:
        """Edit the fields present in ``payload``."""
        question = self._load_question(db, question_id)
        authorize_modification(actor, question, "question")

        if payload.title is not None:
            question.title = _validate_title(payload.title)
        if payload.content is not None:
            question.content = _validate_question_content(payload.content)
        if payload.short_description is not None:
            question.short_description = _validate_short_description(
                payload.short_description, question.content
            )
        if payload.tags is not None:
            question.set_tags(_validate_tags(payload.tags))

        db.commit()
        db.refresh(question)
        logger.info("Question %s updated", question.id)
        return question

    def update_answer(
        self, db: Session, actor: Actor, answer_id: int, payload: AnswerUpdate
    ) -> Answer:
        """Edit an answer; images dropped from the list are deleted from storage."""
        answer = self._load_answer(db, answer_id)
        authorize_modification(actor, answer, "answer")

        answer.content = _validate_answer_content(payload.content)
        removed: list[dict[str, Any]] = []
        if payload.images is not None:
            new_images = [image.model_dump() for image in payload.images]
            kept_ids = {image["public_id"] for image in new_images}
            removed = [image for image in answer.images if image.get("public_id") not in kept_ids]
            answer.images = new_images

        db.commit()
        db.refresh(answer)
        self._discard_images(removed)
        logger.info("Answer %s updated", answer.id)
        return answer

    def delete_answer(self, db: Session, actor: Actor, answer_id: int) -> None:
        """Delete an answer and keep its question's counters consistent."""
        answer = self._load_answer(db, answer_id)
        authorize_modification(actor, answer, "answer")

        question_id = answer.question_id
        images = list(answer.images or [])
        self.votes.clear_items(db, ITEM_TYPE_ANSWER, [answer.id])
        db.execute(delete(Answer).where(Answer.id == answer.id))
        db.execute(
            update(Question)
            .where(Question.id == question_id, Question.answers > 0)
            .values(answers=Question.answers - 1)
        )
        recompute_question_acceptance(db, question_id)
        db.commit()

        logger.info("Answer %s deleted from question %s", answer_id, question_id)
        self._discard_images(images)

    def delete_question(self, db: Session, actor: Actor, question_id: int) -> int:
        """Delete a question with all of its answers and votes.

        Returns:
            Number of answers removed with the question.
        """
        question = self._load_question(db, question_id)
        authorize_modification(actor, question, "question")

        answer_rows = db.execute(
            select(Answer.id, Answer.images).where(Answer.question_id == question.id)
        ).all()
        answer_ids = [answer_id for answer_id, _ in answer_rows]
        images = list(question.images or [])
        for _, answer_images in answer_rows:
            images.extend(answer_images or [])

        self.votes.clear_items(db, ITEM_TYPE_ANSWER, answer_ids)
        self.votes.clear_items(db, ITEM_TYPE_QUESTION, [question.id])
        db.execute(delete(Answer).where(Answer.question_id == question.id))
        db.delete(question)
        db.commit()

        logger.info("Question %s deleted with %d answers", question_id, len(answer_ids))
        self._discard_images(images)
        return len(answer_ids)

    def get_question(
        self, db: Session, question_id: int, count_view: bool = True
    ) -> tuple[Question, list[Answer]]:
        """Return a question with its answers, counting one view."""
        if count_view:
            result = db.execute(
                update(Question)
                .where(Question.id == question_id)
                .values(views=Question.views + 1)
            )
            db.commit()
            if result.rowcount == 0:
                raise NotFoundError("Question not found")
        question = self._load_question(db, question_id)
        return question, self.list_answers(db, question_id=question.id)

    def list_answers(
        self,
        db: Session,
        *,
        question_id: int | None = None,
        author_id: int | None = None,
    ) -> list[Answer]:
        """List answers of a question or by a public author.

        Answers of one question come accepted first, then by upvotes, then
        oldest first. Author listings are newest first.
        """
        if question_id is None and author_id is None:
            raise ValidationFailedError("questionId or author is required")

        stmt = select(Answer)
        if question_id is not None:
            stmt = stmt.where(Answer.question_id == question_id).order_by(
                Answer.is_accepted.desc(),
                _upvote_count(ITEM_TYPE_ANSWER, Answer.id).desc(),
                Answer.created_at.asc(),
                Answer.id.asc(),
            )
        else:
            stmt = stmt.order_by(Answer.created_at.desc(), Answer.id.desc())
        if author_id is not None:
            stmt = stmt.where(Answer.author_id == author_id)
        return list(db.execute(stmt).scalars())

    def list_questions(
        self,
        db: Session,
        *,
        tag: str | None = None,
        author_id: int | None = None,
        search: str | None = None,
        filter: str = "all",
        sort: str = "newest",
        page: int = 1,
        limit: int = 10,
    ) -> QuestionPage:
        """Return one page of questions.

        Unknown sort keys fall back to newest first.

        Raises:
            ValidationFailedError: If the filter or paging values are invalid
        """
        if filter not in QUESTION_FILTERS:
            raise ValidationFailedError(f"Unknown filter: {filter}")
        if page < 1 or not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationFailedError("Invalid pagination parameters")

        conditions: list[Any] = []
        if tag:
            conditions.append(
                Question.id.in_(
                    select(QuestionTag.question_id).where(
                        QuestionTag.name == tag.strip().lower()
                    )
                )
            )
        if author_id is not None:
            conditions.append(Question.author_id == author_id)
        if search:
            pattern = f"%{search.strip()}%"
            conditions.append(or_(Question.title.ilike(pattern), Question.content.ilike(pattern)))

        upvotes = _upvote_count(ITEM_TYPE_QUESTION, Question.id)
        if filter == "unanswered":
            conditions.append(Question.answers == 0)
        elif filter == "accepted":
            conditions.append(Question.is_accepted.is_(True))
        elif filter == "upvoted":
            conditions.append(upvotes > 0)

        if sort in ("popular", "views"):
            order = (Question.views.desc(), Question.created_at.desc())
        elif sort == "votes":
            order = (upvotes.desc(), Question.created_at.desc())
        else:
            order = (Question.created_at.desc(),)

        total = db.execute(
            select(func.count()).select_from(Question).where(*conditions)
        ).scalar_one()
        questions = db.execute(
            select(Question)
            .where(*conditions)
            .order_by(*order, Question.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars()
        return QuestionPage(questions=list(questions), page=page, limit=limit, total=int(total))


def get_content_service() -> ContentService:
    """Return a content service wired to the shared collaborators."""
    return ContentService()
