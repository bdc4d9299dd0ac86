# tests/services/test_acceptance_service.py
"""Tests for the answer acceptance state machine."""

import pytest
from sqlalchemy.orm import Session

from qa_forum.core.errors import ForbiddenError, NotFoundError
from qa_forum.models import Account, Answer, Notification, Question
from qa_forum.schemas.content import AnswerCreate, QuestionCreate
from qa_forum.services.acceptance import AcceptanceService
from qa_forum.services.identity import AnonymousActor, AuthenticatedActor
from qa_forum.services.reputation import ReputationLedger


def _actor(account: Account) -> AuthenticatedActor:
    return AuthenticatedActor(account_id=account.id, role=account.role)


@pytest.fixture()
def acceptance(fanout) -> AcceptanceService:
    return AcceptanceService(ledger=ReputationLedger(), fanout=fanout)


@pytest.fixture()
def question(db_session, content_service, alice) -> Question:
    created, _ = content_service.create_question(
        db_session,
        _actor(alice),
        QuestionCreate(
            title="Which answer is right?",
            content="Several people answered and I need to pick one.",
            tags=["meta"],
        ),
    )
    return created


def _answer(db_session, content_service, account, question, **extra) -> Answer:
    answer, _ = content_service.create_answer(
        db_session,
        _actor(account),
        AnswerCreate(content="This is my detailed answer.", question_id=question.id, **extra),
    )
    return answer


def _reload(db_session, model, item_id):
    db_session.expire_all()
    return db_session.get(model, item_id)


def test_accept_then_unaccept_single_answer(
    db_session, content_service, acceptance, question, alice, bob
) -> None:
    answer = _answer(db_session, content_service, bob, question)

    accepted = acceptance.toggle(db_session, _actor(alice), answer.id)
    assert accepted.is_accepted is True
    assert accepted.question_is_accepted is True
    assert _reload(db_session, Question, question.id).is_accepted is True
    assert _reload(db_session, Account, bob.id).accepted_answers == 1

    unaccepted = acceptance.toggle(db_session, _actor(alice), answer.id)
    assert unaccepted.is_accepted is False
    assert unaccepted.question_is_accepted is False
    assert _reload(db_session, Answer, answer.id).is_accepted is False
    # The accepted counter is never decremented.
    assert _reload(db_session, Account, bob.id).accepted_answers == 1


def test_question_stays_accepted_while_any_answer_is(
    db_session, content_service, acceptance, question, alice, bob, carol
) -> None:
    first = _answer(db_session, content_service, bob, question)
    second = _answer(db_session, content_service, carol, question)

    acceptance.toggle(db_session, _actor(alice), first.id)
    acceptance.toggle(db_session, _actor(alice), second.id)
    result = acceptance.toggle(db_session, _actor(alice), first.id)

    assert result.is_accepted is False
    assert result.question_is_accepted is True
    assert _reload(db_session, Answer, second.id).is_accepted is True


def test_reaccepting_counts_again(
    db_session, content_service, acceptance, question, alice, bob
) -> None:
    answer = _answer(db_session, content_service, bob, question)

    for _ in range(3):
        acceptance.toggle(db_session, _actor(alice), answer.id)

    assert _reload(db_session, Account, bob.id).accepted_answers == 2
    assert _reload(db_session, Account, bob.id).reputation == 100


def test_toggle_reads_the_current_flag_after_a_concurrent_accept(
    engine, db_session, content_service, acceptance, question, alice, bob
) -> None:
    answer = _answer(db_session, content_service, bob, question)
    other = Session(bind=engine)
    try:
        # A second request holds a copy loaded before the first accept lands.
        assert other.get(Answer, answer.id).is_accepted is False
        acceptance.toggle(db_session, _actor(alice), answer.id)

        result = acceptance.toggle(other, _actor(alice), answer.id)
    finally:
        other.close()

    assert result.is_accepted is False
    assert _reload(db_session, Answer, answer.id).is_accepted is False
    assert _reload(db_session, Account, bob.id).accepted_answers == 1


def test_accept_notifies_answer_author(
    db_session, content_service, acceptance, question, alice, bob, publisher
) -> None:
    answer = _answer(db_session, content_service, bob, question)
    acceptance.toggle(db_session, _actor(alice), answer.id)

    notification = (
        db_session.query(Notification)
        .filter(Notification.recipient_id == bob.id, Notification.type == "accept")
        .one()
    )
    assert notification.sender_id == alice.id
    assert notification.related_answer_id == answer.id
    assert "Which answer is right?" in notification.message
    assert (bob.id, "accept") in [(account_id, event["type"]) for account_id, event in publisher.events]


def test_unaccept_does_not_notify(
    db_session, content_service, acceptance, question, alice, bob
) -> None:
    answer = _answer(db_session, content_service, bob, question)
    acceptance.toggle(db_session, _actor(alice), answer.id)
    acceptance.toggle(db_session, _actor(alice), answer.id)

    assert db_session.query(Notification).filter(Notification.type == "accept").count() == 1


def test_anonymous_answer_counts_but_is_not_notified(
    db_session, content_service, acceptance, question, alice, bob
) -> None:
    answer = _answer(db_session, content_service, bob, question, anonymous=True)
    acceptance.toggle(db_session, _actor(alice), answer.id)

    assert _reload(db_session, Account, bob.id).accepted_answers == 1
    assert db_session.query(Notification).filter(Notification.type == "accept").count() == 0


def test_only_question_author_may_toggle(
    db_session, content_service, acceptance, question, bob, carol
) -> None:
    answer = _answer(db_session, content_service, bob, question)

    with pytest.raises(ForbiddenError):
        acceptance.toggle(db_session, _actor(carol), answer.id)
    with pytest.raises(ForbiddenError):
        acceptance.toggle(db_session, _actor(bob), answer.id)
    assert _reload(db_session, Answer, answer.id).is_accepted is False


def test_anonymous_actor_cannot_toggle(
    db_session, content_service, acceptance, question, bob
) -> None:
    answer = _answer(db_session, content_service, bob, question)

    with pytest.raises(ForbiddenError):
        acceptance.toggle(db_session, AnonymousActor(token="tok-123"), answer.id)


def test_missing_answer(db_session, acceptance, alice) -> None:
    with pytest.raises(NotFoundError):
        acceptance.toggle(db_session, _actor(alice), 999)
