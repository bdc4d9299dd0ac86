# src/qa_forum/api/v1/endpoints/follows.py
"""Follow graph endpoints for the Q&A API."""

from typing import Annotated

from fastapi import APIRouter, Query

from qa_forum.api.v1.dependencies import CurrentAccountDep, FollowServiceDep, SessionDep
from qa_forum.schemas.common import MessageResponse
from qa_forum.schemas.follow import (
    FollowCreate,
    FollowGraph,
    FollowRequestDecision,
    FollowResponse,
)
from qa_forum.services.follows import STATUS_PENDING

router = APIRouter(tags=["follows"])


@router.get("/follow/", response_model=FollowGraph)
async def get_follow_graph(
    current_account: CurrentAccountDep,
    db: SessionDep,
    service: FollowServiceDep,
) -> FollowGraph:
    """Return the caller's followers, followees and pending requests."""
    account_id = current_account.account_id
    return FollowGraph(
        followers=service.followers_of(db, account_id),
        following=service.following_of(db, account_id),
        pending_requests=service.pending_requests_for(db, account_id),
    )


@router.post("/follow/", response_model=FollowResponse)
async def follow(
    follow_data: FollowCreate,
    current_account: CurrentAccountDep,
    db: SessionDep,
    service: FollowServiceDep,
) -> FollowResponse:
    """Follow an account, or request to follow a private one."""
    result = service.follow(db, current_account.account_id, follow_data.user_id)
    message = "Follow request sent" if result == STATUS_PENDING else "Successfully followed user"
    return FollowResponse(message=message, status=result)


@router.delete("/follow/", response_model=MessageResponse)
async def unfollow(
    user_id: Annotated[int, Query(alias="userId")],
    current_account: CurrentAccountDep,
    db: SessionDep,
    service: FollowServiceDep,
) -> MessageResponse:
    """Stop following an account and withdraw any pending request."""
    service.unfollow(db, current_account.account_id, user_id)
    return MessageResponse(message="Successfully unfollowed user")


@router.post("/follow-requests/", response_model=MessageResponse)
async def accept_follow_request(
    decision: FollowRequestDecision,
    current_account: CurrentAccountDep,
    db: SessionDep,
    service: FollowServiceDep,
) -> MessageResponse:
    """Accept a pending follow request."""
    service.accept_request(db, current_account.account_id, decision.requester_id)
    return MessageResponse(message="Follow request accepted")


@router.delete("/follow-requests/", response_model=MessageResponse)
async def reject_follow_request(
    requester_id: Annotated[int, Query(alias="requesterId")],
    current_account: CurrentAccountDep,
    db: SessionDep,
    service: FollowServiceDep,
) -> MessageResponse:
    """Reject a pending follow request."""
    service.reject_request(db, current_account.account_id, requester_id)
    return MessageResponse(message="Follow request rejected")
