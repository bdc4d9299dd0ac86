# src/qa_forum/api/v1/endpoints/answers.py
"""Answer endpoints for the Q&A API."""

from typing import Annotated

from fastapi import APIRouter, Body, Query, status
from sqlalchemy.orm import Session

from qa_forum.api.v1.dependencies import (
    AcceptanceServiceDep,
    ActorDep,
    AnonTokenHeader,
    ContentServiceDep,
    SessionAccountIdDep,
    SessionDep,
)
from qa_forum.models import ITEM_TYPE_ANSWER, Answer
from qa_forum.schemas.common import MessageResponse
from qa_forum.schemas.content import (
    AcceptResponse,
    AnswerCreate,
    AnswerCreated,
    AnswerList,
    AnswerResponse,
    AnswerUpdate,
)
from qa_forum.services.content import ContentService
from qa_forum.services.identity import resolve_actor

router = APIRouter(prefix="/answers", tags=["answers"])


def answer_response(db: Session, service: ContentService, answer: Answer) -> AnswerResponse:
    """Serialize an answer together with its current vote sets."""
    return AnswerResponse.from_item(answer, service.votes.get_tally(db, ITEM_TYPE_ANSWER, answer.id))


@router.post("/", response_model=AnswerCreated, status_code=status.HTTP_201_CREATED)
async def create_answer(
    answer_data: AnswerCreate,
    actor: ActorDep,
    db: SessionDep,
    service: ContentServiceDep,
) -> AnswerCreated:
    """Answer a question."""
    answer, points = service.create_answer(db, actor, answer_data)
    response = answer_response(db, service, answer)
    return AnswerCreated(**response.model_dump(), reputation_gained=points)


@router.get("/", response_model=AnswerList)
async def list_answers(
    db: SessionDep,
    service: ContentServiceDep,
    question_id: Annotated[int | None, Query(alias="questionId")] = None,
    author: int | None = None,
) -> AnswerList:
    """List the answers of a question or of a public author."""
    answers = service.list_answers(db, question_id=question_id, author_id=author)
    return AnswerList(answers=[answer_response(db, service, answer) for answer in answers])


@router.put("/{answer_id}", response_model=AnswerResponse)
async def update_answer(
    answer_id: int,
    answer_data: AnswerUpdate,
    account_id: SessionAccountIdDep,
    db: SessionDep,
    service: ContentServiceDep,
    anon_token: AnonTokenHeader = None,
) -> AnswerResponse:
    """Edit an answer as its author, its anonymous token holder or a moderator."""
    actor = resolve_actor(
        db, account_id=account_id, anon_token=answer_data.anon_user_id or anon_token
    )
    answer = service.update_answer(db, actor, answer_id, answer_data)
    return answer_response(db, service, answer)


@router.delete("/{answer_id}", response_model=MessageResponse)
async def delete_answer(
    answer_id: int,
    account_id: SessionAccountIdDep,
    db: SessionDep,
    service: ContentServiceDep,
    anon_token: AnonTokenHeader = None,
    body_anon_user_id: Annotated[str | None, Body(alias="anonUserId", embed=True)] = None,
    anon_user_id: Annotated[str | None, Query(alias="anonUserId")] = None,
) -> MessageResponse:
    """Delete an answer."""
    anon_token = body_anon_user_id or anon_user_id or anon_token
    actor = resolve_actor(db, account_id=account_id, anon_token=anon_token)
    service.delete_answer(db, actor, answer_id)
    return MessageResponse(message="Answer deleted successfully")


@router.put("/{answer_id}/accept", response_model=AcceptResponse)
async def accept_answer(
    answer_id: int,
    actor: ActorDep,
    db: SessionDep,
    acceptance: AcceptanceServiceDep,
) -> AcceptResponse:
    """Toggle acceptance of an answer; only the question's author may do so."""
    result = acceptance.toggle(db, actor, answer_id)
    return AcceptResponse(
        message="Answer accepted" if result.is_accepted else "Answer unaccepted",
        is_accepted=result.is_accepted,
        question_is_accepted=result.question_is_accepted,
    )
