"""Follow graph Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class FollowCreate(BaseModel):
    """Schema for following an account."""

    user_id: int = Field(..., alias="userId")

    model_config = ConfigDict(populate_by_name=True)


class FollowRequestDecision(BaseModel):
    """Schema for accepting a pending follow request."""

    requester_id: int = Field(..., alias="requesterId")

    model_config = ConfigDict(populate_by_name=True)


class FollowResponse(BaseModel):
    """Outcome of a follow call."""

    message: str
    status: Literal["following", "pending"]


class FollowGraph(BaseModel):
    """Followers, followees and pending requests of the caller."""

    followers: list[int]
    following: list[int]
    pending_requests: list[int] = Field(..., serialization_alias="pendingRequests")
