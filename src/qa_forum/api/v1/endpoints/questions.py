# src/qa_forum/api/v1/endpoints/questions.py
"""Question endpoints for the Q&A API."""

from typing import Annotated

from fastapi import APIRouter, Body, Query, status
from sqlalchemy.orm import Session

from qa_forum.api.v1.dependencies import (
    ActorDep,
    AnonTokenHeader,
    ContentServiceDep,
    SessionAccountIdDep,
    SessionDep,
)
from qa_forum.models import ITEM_TYPE_QUESTION, Question
from qa_forum.schemas.common import MessageResponse, Pagination
from qa_forum.schemas.content import (
    QuestionCreate,
    QuestionCreated,
    QuestionDetail,
    QuestionList,
    QuestionResponse,
    QuestionUpdate,
)
from qa_forum.services.content import ContentService
from qa_forum.services.identity import resolve_actor

from .answers import answer_response

router = APIRouter(prefix="/questions", tags=["questions"])


def question_response(db: Session, service: ContentService, question: Question) -> QuestionResponse:
    """Serialize a question together with its current vote sets."""
    return QuestionResponse.from_item(
        question, service.votes.get_tally(db, ITEM_TYPE_QUESTION, question.id)
    )


@router.post("/", response_model=QuestionCreated, status_code=status.HTTP_201_CREATED)
async def create_question(
    question_data: QuestionCreate,
    actor: ActorDep,
    db: SessionDep,
    service: ContentServiceDep,
) -> QuestionCreated:
    """Ask a question."""
    question, points = service.create_question(db, actor, question_data)
    response = question_response(db, service, question)
    return QuestionCreated(**response.model_dump(), reputation_gained=points)


@router.get("/", response_model=QuestionList)
async def list_questions(
    db: SessionDep,
    service: ContentServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    tag: str | None = None,
    author: int | None = None,
    search: str | None = None,
    sort: str = "newest",
    filter: str = "all",
) -> QuestionList:
    """List questions with optional filters, newest first by default."""
    result = service.list_questions(
        db,
        tag=tag,
        author_id=author,
        search=search,
        filter=filter,
        sort=sort,
        page=page,
        limit=limit,
    )
    return QuestionList(
        questions=[question_response(db, service, question) for question in result.questions],
        pagination=Pagination(
            page=result.page,
            limit=result.limit,
            total=result.total,
            pages=result.pages,
        ),
    )


@router.get("/{question_id}", response_model=QuestionDetail)
async def get_question(
    question_id: int,
    db: SessionDep,
    service: ContentServiceDep,
) -> QuestionDetail:
    """Return a question with its ranked answers; counts one view."""
    question, answers = service.get_question(db, question_id)
    return QuestionDetail(
        question=question_response(db, service, question),
        answers=[answer_response(db, service, answer) for answer in answers],
    )


@router.put("/{question_id}", response_model=QuestionResponse)
async def update_question(
    question_id: int,
    question_data: QuestionUpdate,
    account_id: SessionAccountIdDep,
    db: SessionDep,
    service: ContentServiceDep,
    anon_token: AnonTokenHeader = None,
) -> QuestionResponse:
    """Edit a question as its author, its anonymous token holder or a moderator."""
    actor = resolve_actor(
        db, account_id=account_id, anon_token=question_data.anon_user_id or anon_token
    )
    question = service.update_question(db, actor, question_id, question_data)
    return question_response(db, service, question)


@router.delete("/{question_id}", response_model=MessageResponse)
async def delete_question(
    question_id: int,
    account_id: SessionAccountIdDep,
    db: SessionDep,
    service: ContentServiceDep,
    anon_token: AnonTokenHeader = None,
    body_anon_user_id: Annotated[str | None, Body(alias="anonUserId", embed=True)] = None,
    anon_user_id: Annotated[str | None, Query(alias="anonUserId")] = None,
) -> MessageResponse:
    """Delete a question together with all of its answers."""
    anon_token = body_anon_user_id or anon_user_id or anon_token
    actor = resolve_actor(db, account_id=account_id, anon_token=anon_token)
    service.delete_question(db, actor, question_id)
    return MessageResponse(message="Question and all related answers deleted successfully")
