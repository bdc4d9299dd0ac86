"""Question and answer Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from qa_forum.models import Answer, Question
from qa_forum.schemas.common import ImageRef, Pagination
from qa_forum.schemas.vote import VoteSets
from qa_forum.services.votes import VoteTally


class QuestionCreate(BaseModel):
    """Schema for asking a question."""

    title: str
    content: str
    tags: list[str] = Field(default_factory=list)
    short_description: str | None = Field(None, alias="shortDescription")
    images: list[ImageRef] = Field(default_factory=list)
    anonymous: bool = False
    anonymous_name: str | None = Field(None, alias="anonymousName", max_length=50)
    anon_user_id: str | None = Field(None, alias="anonUserId", max_length=128)

    model_config = ConfigDict(populate_by_name=True)


class QuestionUpdate(BaseModel):
    """Schema for editing a question; omitted fields stay unchanged."""

    title: str | None = None
    content: str | None = None
    tags: list[str] | None = None
    short_description: str | None = Field(None, alias="shortDescription")
    anon_user_id: str | None = Field(None, alias="anonUserId")

    model_config = ConfigDict(populate_by_name=True)


class AnswerCreate(BaseModel):
    """Schema for answering a question."""

    content: str
    question_id: int = Field(..., alias="questionId")
    images: list[ImageRef] = Field(default_factory=list)
    anonymous: bool = False
    anonymous_name: str | None = Field(None, alias="anonymousName", max_length=50)
    anon_user_id: str | None = Field(None, alias="anonUserId", max_length=128)

    model_config = ConfigDict(populate_by_name=True)


class AnswerUpdate(BaseModel):
    """Schema for editing an answer."""

    content: str
    images: list[ImageRef] | None = None
    anon_user_id: str | None = Field(None, alias="anonUserId")

    model_config = ConfigDict(populate_by_name=True)


class _ContentResponse(BaseModel):
    id: int
    author_id: int | None = Field(None, serialization_alias="authorId")
    anonymous: bool
    anonymous_name: str | None = Field(None, serialization_alias="anonymousName")
    images: list[dict[str, object]]
    votes: VoteSets
    vote_count: int = Field(..., serialization_alias="voteCount")
    is_accepted: bool = Field(..., serialization_alias="isAccepted")
    created_at: datetime = Field(..., serialization_alias="createdAt")
    updated_at: datetime = Field(..., serialization_alias="updatedAt")


class QuestionResponse(_ContentResponse):
    """Question as returned by the API."""

    title: str
    content: str
    short_description: str = Field(..., serialization_alias="shortDescription")
    tags: list[str]
    views: int
    answers: int

    @classmethod
    def from_item(cls, question: Question, tally: VoteTally) -> QuestionResponse:
        return cls(
            id=question.id,
            author_id=question.author_id,
            anonymous=question.anonymous,
            anonymous_name=question.anonymous_name,
            images=list(question.images or []),
            votes=VoteSets(upvotes=tally.upvotes, downvotes=tally.downvotes),
            vote_count=tally.score,
            is_accepted=question.is_accepted,
            created_at=question.created_at,
            updated_at=question.updated_at,
            title=question.title,
            content=question.content,
            short_description=question.short_description,
            tags=question.tags,
            views=question.views,
            answers=question.answers,
        )


class AnswerResponse(_ContentResponse):
    """Answer as returned by the API."""

    question_id: int = Field(..., serialization_alias="questionId")
    content: str

    @classmethod
    def from_item(cls, answer: Answer, tally: VoteTally) -> AnswerResponse:
        return cls(
            id=answer.id,
            author_id=answer.author_id,
            anonymous=answer.anonymous,
            anonymous_name=answer.anonymous_name,
            images=list(answer.images or []),
            votes=VoteSets(upvotes=tally.upvotes, downvotes=tally.downvotes),
            vote_count=tally.score,
            is_accepted=answer.is_accepted,
            created_at=answer.created_at,
            updated_at=answer.updated_at,
            question_id=answer.question_id,
            content=answer.content,
        )


class QuestionCreated(QuestionResponse):
    """Created question plus the reputation it earned."""

    reputation_gained: int = Field(..., serialization_alias="reputationGained")


class AnswerCreated(AnswerResponse):
    """Created answer plus the reputation it earned."""

    reputation_gained: int = Field(..., serialization_alias="reputationGained")


class QuestionDetail(BaseModel):
    """A question with its answers."""

    question: QuestionResponse
    answers: list[AnswerResponse]


class QuestionList(BaseModel):
    """One page of questions."""

    questions: list[QuestionResponse]
    pagination: Pagination


class AnswerList(BaseModel):
    """Answers matching a filter."""

    answers: list[AnswerResponse]


class AcceptResponse(BaseModel):
    """Outcome of an acceptance toggle."""

    message: str
    is_accepted: bool = Field(..., serialization_alias="isAccepted")
    question_is_accepted: bool = Field(..., serialization_alias="questionIsAccepted")
