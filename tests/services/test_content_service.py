# tests/services/test_content_service.py
"""Tests for question and answer lifecycle operations."""

import pytest
from sqlalchemy.exc import OperationalError

from qa_forum.core.errors import (
    DependencyFailureError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationFailedError,
)
from qa_forum.models import Account, Answer, ContentVote, Notification, Question, QuestionTag
from qa_forum.schemas.common import ImageRef
from qa_forum.schemas.content import AnswerCreate, AnswerUpdate, QuestionCreate, QuestionUpdate
from qa_forum.services.acceptance import AcceptanceService
from qa_forum.services.content import ContentService, normalize_tags
from qa_forum.services.identity import AnonymousActor, AuthenticatedActor
from qa_forum.services.reputation import ReputationLedger
from qa_forum.services.votes import DOWNVOTE, UPVOTE, VoteLedger


def _actor(account: Account) -> AuthenticatedActor:
    return AuthenticatedActor(account_id=account.id, role=account.role)


def _question_payload(**overrides) -> QuestionCreate:
    values = {
        "title": "What is a scalar subquery?",
        "content": "I keep seeing scalar subqueries in ORM code and want to understand them.",
        "tags": ["SQL", " sqlalchemy "],
    }
    values.update(overrides)
    return QuestionCreate(**values)


def _ask(db_session, service, account, **overrides) -> Question:
    question, _ = service.create_question(db_session, _actor(account), _question_payload(**overrides))
    return question


def _answer(db_session, service, account, question, **overrides) -> Answer:
    values = {"content": "A subquery that returns one value.", "question_id": question.id}
    values.update(overrides)
    answer, _ = service.create_answer(db_session, _actor(account), AnswerCreate(**values))
    return answer


def _reload(db_session, model, item_id):
    db_session.expire_all()
    return db_session.get(model, item_id)


class _FailingLedger(ReputationLedger):
    def question_created(self, db, account_id):
        raise OperationalError("UPDATE account", {}, Exception("disk full"))


def test_normalize_tags() -> None:
    assert normalize_tags([" Python", "python", "", "FastAPI "]) == ["python", "fastapi"]


def test_create_question_awards_reputation(db_session, content_service, alice) -> None:
    question, points = content_service.create_question(db_session, _actor(alice), _question_payload())

    account = _reload(db_session, Account, alice.id)
    assert points == 50
    assert account.reputation == 50
    assert account.questions_asked == 1
    question = _reload(db_session, Question, question.id)
    assert question.tags == ["sql", "sqlalchemy"]
    assert question.author_id == alice.id
    assert question.real_author_id == alice.id
    assert question.short_description.startswith("I keep seeing")


def test_create_question_requires_account(db_session, content_service) -> None:
    with pytest.raises(UnauthorizedError):
        content_service.create_question(db_session, AnonymousActor(token="tok"), _question_payload())


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "Too short"},
        {"content": "Not enough"},
        {"tags": ["  "]},
        {"short_description": "x" * 201},
    ],
)
def test_create_question_validation(db_session, content_service, alice, overrides) -> None:
    with pytest.raises(ValidationFailedError):
        content_service.create_question(db_session, _actor(alice), _question_payload(**overrides))

    assert db_session.query(Question).count() == 0
    assert _reload(db_session, Account, alice.id).reputation == 0


def test_failed_write_discards_uploaded_images(db_session, fanout, asset_store, alice) -> None:
    service = ContentService(
        ledger=_FailingLedger(), fanout=fanout, votes=VoteLedger(), assets=asset_store
    )
    images = [ImageRef(url="https://cdn/x.png", public_id="qa-forum/x")]

    with pytest.raises(DependencyFailureError):
        service.create_question(db_session, _actor(alice), _question_payload(images=images))

    assert asset_store.discarded == ["qa-forum/x"]
    assert db_session.query(Question).count() == 0


def test_rejected_input_discards_uploaded_images(db_session, content_service, asset_store, alice) -> None:
    images = [ImageRef(url="https://cdn/y.png", public_id="qa-forum/y")]

    with pytest.raises(ValidationFailedError):
        content_service.create_question(
            db_session, _actor(alice), _question_payload(title="short", images=images)
        )

    assert asset_store.discarded == ["qa-forum/y"]


def test_create_answer_updates_counters_and_notifies(
    db_session, content_service, alice, bob
) -> None:
    question = _ask(db_session, content_service, alice)
    answer, points = content_service.create_answer(
        db_session,
        _actor(bob),
        AnswerCreate(content="A subquery that returns one value.", question_id=question.id),
    )

    assert points == 100
    assert _reload(db_session, Question, question.id).answers == 1
    bob_account = _reload(db_session, Account, bob.id)
    assert bob_account.reputation == 100
    assert bob_account.answers_given == 1
    notification = db_session.query(Notification).filter(Notification.type == "answer").one()
    assert notification.recipient_id == alice.id
    assert notification.sender_id == bob.id
    assert notification.related_answer_id == answer.id
    assert notification.message == 'Bob answered your question: "What is a scalar subquery?"'


def test_anonymous_answer_hides_sender(db_session, content_service, alice, bob) -> None:
    question = _ask(db_session, content_service, alice)
    answer = _answer(
        db_session, content_service, bob, question, anonymous=True, anon_user_id="tok-bob"
    )

    assert answer.author_id is None
    assert answer.anonymous_token == "tok-bob"
    assert answer.real_author_id == bob.id
    notification = db_session.query(Notification).filter(Notification.type == "answer").one()
    assert notification.sender_id is None
    assert notification.message.startswith("Anonymous answered your question")


def test_answering_own_question_does_not_notify(db_session, content_service, alice) -> None:
    question = _ask(db_session, content_service, alice)
    _answer(db_session, content_service, alice, question, anonymous=True)

    assert db_session.query(Notification).count() == 0


def test_answer_to_missing_question(db_session, content_service, bob) -> None:
    with pytest.raises(NotFoundError):
        content_service.create_answer(
            db_session, _actor(bob), AnswerCreate(content="Long enough answer", question_id=404)
        )
    assert _reload(db_session, Account, bob.id).reputation == 0


def test_anonymous_token_holder_can_delete(db_session, content_service, alice) -> None:
    question = _ask(db_session, content_service, alice, anonymous=True, anon_user_id="tok-123")

    with pytest.raises(ForbiddenError):
        content_service.delete_question(db_session, AnonymousActor(token="tok-999"), question.id)
    content_service.delete_question(db_session, AnonymousActor(token="tok-123"), question.id)

    assert _reload(db_session, Question, question.id) is None


def test_update_question(db_session, content_service, alice, bob) -> None:
    question = _ask(db_session, content_service, alice)

    with pytest.raises(ForbiddenError):
        content_service.update_question(
            db_session, _actor(bob), question.id, QuestionUpdate(title="Hijacked question title")
        )
    updated = content_service.update_question(
        db_session,
        _actor(alice),
        question.id,
        QuestionUpdate(title="What exactly is a scalar subquery?", tags=["ORM"]),
    )

    assert updated.title == "What exactly is a scalar subquery?"
    assert updated.tags == ["orm"]
    assert db_session.query(QuestionTag).count() == 1


def test_update_answer_discards_removed_images(
    db_session, content_service, asset_store, alice, bob
) -> None:
    question = _ask(db_session, content_service, alice)
    answer = _answer(
        db_session,
        content_service,
        bob,
        question,
        images=[
            ImageRef(url="https://cdn/a.png", public_id="qa-forum/a"),
            ImageRef(url="https://cdn/b.png", public_id="qa-forum/b"),
        ],
    )

    updated = content_service.update_answer(
        db_session,
        _actor(bob),
        answer.id,
        AnswerUpdate(
            content="An edited, better answer.",
            images=[ImageRef(url="https://cdn/a.png", public_id="qa-forum/a")],
        ),
    )

    assert updated.content == "An edited, better answer."
    assert [image["public_id"] for image in updated.images] == ["qa-forum/a"]
    assert asset_store.discarded == ["qa-forum/b"]


def test_delete_answer_recomputes_question(
    db_session, content_service, fanout, alice, bob
) -> None:
    question = _ask(db_session, content_service, alice)
    answer = _answer(db_session, content_service, bob, question)
    AcceptanceService(ledger=ReputationLedger(), fanout=fanout).toggle(
        db_session, _actor(alice), answer.id
    )
    VoteLedger().apply_vote(db_session, "answer", answer.id, alice.id, UPVOTE)

    content_service.delete_answer(db_session, _actor(bob), answer.id)

    question = _reload(db_session, Question, question.id)
    assert question.answers == 0
    assert question.is_accepted is False
    assert db_session.query(ContentVote).count() == 0
    # Reputation and counters are not rolled back.
    assert _reload(db_session, Account, bob.id).reputation == 100


def test_delete_question_cascades(db_session, content_service, alice, bob, carol) -> None:
    question = _ask(db_session, content_service, alice)
    other = _ask(db_session, content_service, bob, title="Another unrelated question")
    first = _answer(db_session, content_service, bob, question)
    second = _answer(db_session, content_service, carol, question)
    kept = _answer(db_session, content_service, carol, other)
    ledger = VoteLedger()
    ledger.apply_vote(db_session, "question", question.id, bob.id, UPVOTE)
    ledger.apply_vote(db_session, "answer", first.id, carol.id, DOWNVOTE)
    ledger.apply_vote(db_session, "answer", second.id, alice.id, UPVOTE)
    ledger.apply_vote(db_session, "answer", kept.id, alice.id, UPVOTE)

    removed = content_service.delete_question(db_session, _actor(alice), question.id)

    assert removed == 2
    assert _reload(db_session, Question, question.id) is None
    assert db_session.query(Answer).filter(Answer.question_id == question.id).count() == 0
    assert [vote.item_id for vote in db_session.query(ContentVote).all()] == [kept.id]
    assert db_session.query(QuestionTag).filter(QuestionTag.question_id == question.id).count() == 0
    assert _reload(db_session, Answer, kept.id) is not None


def test_moderator_can_delete(db_session, content_service, make_account, alice) -> None:
    moderator = make_account(role="admin")
    question = _ask(db_session, content_service, alice)

    content_service.delete_question(db_session, _actor(moderator), question.id)

    assert _reload(db_session, Question, question.id) is None


def test_get_question_counts_views_and_ranks_answers(
    db_session, content_service, fanout, alice, bob, carol, make_account
) -> None:
    dave = make_account(display_name="Dave")
    question = _ask(db_session, content_service, alice)
    oldest = _answer(db_session, content_service, bob, question)
    popular = _answer(db_session, content_service, carol, question)
    accepted = _answer(db_session, content_service, dave, question)
    ledger = VoteLedger()
    ledger.apply_vote(db_session, "answer", popular.id, alice.id, UPVOTE)
    ledger.apply_vote(db_session, "answer", popular.id, bob.id, UPVOTE)
    AcceptanceService(ledger=ReputationLedger(), fanout=fanout).toggle(
        db_session, _actor(alice), accepted.id
    )

    content_service.get_question(db_session, question.id)
    loaded, answers = content_service.get_question(db_session, question.id)

    assert loaded.views == 2
    assert [answer.id for answer in answers] == [accepted.id, popular.id, oldest.id]


def test_get_missing_question(db_session, content_service) -> None:
    with pytest.raises(NotFoundError):
        content_service.get_question(db_session, 404)


def test_list_questions_filters(db_session, content_service, alice, bob) -> None:
    unanswered = _ask(db_session, content_service, alice, tags=["python"])
    answered = _ask(db_session, content_service, alice, title="Second question here", tags=["sql"])
    _answer(db_session, content_service, bob, answered)
    VoteLedger().apply_vote(db_session, "question", answered.id, bob.id, UPVOTE)

    page = content_service.list_questions(db_session, filter="unanswered")
    assert [q.id for q in page.questions] == [unanswered.id]

    page = content_service.list_questions(db_session, filter="upvoted")
    assert [q.id for q in page.questions] == [answered.id]

    page = content_service.list_questions(db_session, tag="SQL")
    assert [q.id for q in page.questions] == [answered.id]

    page = content_service.list_questions(db_session, search="Second")
    assert [q.id for q in page.questions] == [answered.id]

    page = content_service.list_questions(db_session)
    assert [q.id for q in page.questions] == [answered.id, unanswered.id]
    assert page.total == 2


def test_list_questions_pagination(db_session, content_service, alice) -> None:
    for index in range(3):
        _ask(db_session, content_service, alice, title=f"Paginated question {index}")

    page = content_service.list_questions(db_session, page=2, limit=2)

    assert len(page.questions) == 1
    assert page.total == 3
    assert page.pages == 2


def test_list_questions_rejects_unknown_filter(db_session, content_service) -> None:
    with pytest.raises(ValidationFailedError):
        content_service.list_questions(db_session, filter="hot")
