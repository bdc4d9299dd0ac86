# src/qa_forum/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Q&A API."""

from typing import Literal

from fastapi import APIRouter

from qa_forum.api.v1.dependencies import (
    CurrentAccountDep,
    SessionAccountIdDep,
    SessionDep,
    VoteLedgerDep,
)
from qa_forum.schemas.vote import VoteCreate, VoteResponse, VoteSets
from qa_forum.services.votes import VoteTally

router = APIRouter(prefix="/votes", tags=["votes"])


def _vote_response(item_type: str, item_id: int, tally: VoteTally, my_vote: int) -> VoteResponse:
    return VoteResponse(
        item_type=item_type,
        item_id=item_id,
        votes=VoteSets(upvotes=tally.upvotes, downvotes=tally.downvotes),
        upvote_count=tally.upvote_count,
        downvote_count=tally.downvote_count,
        score=tally.score,
        my_vote=my_vote,
    )


@router.post("/", response_model=VoteResponse)
async def cast_vote(
    vote_data: VoteCreate,
    current_account: CurrentAccountDep,
    db: SessionDep,
    ledger: VoteLedgerDep,
) -> VoteResponse:
    """Cast, flip or withdraw a vote on a question or answer."""
    tally = ledger.apply_vote(
        db,
        vote_data.item_type,
        vote_data.item_id,
        current_account.account_id,
        vote_data.direction_value,
    )
    my_vote = ledger.get_vote_direction(
        db, vote_data.item_type, vote_data.item_id, current_account.account_id
    )
    return _vote_response(vote_data.item_type, vote_data.item_id, tally, my_vote)


@router.get("/{item_type}/{item_id}", response_model=VoteResponse)
async def get_votes(
    item_type: Literal["question", "answer"],
    item_id: int,
    account_id: SessionAccountIdDep,
    db: SessionDep,
    ledger: VoteLedgerDep,
) -> VoteResponse:
    """Return the vote sets of an item and the caller's own vote."""
    ledger.ensure_item_exists(db, item_type, item_id)
    tally = ledger.get_tally(db, item_type, item_id)
    my_vote = (
        ledger.get_vote_direction(db, item_type, item_id, account_id)
        if account_id is not None
        else 0
    )
    return _vote_response(item_type, item_id, tally, my_vote)
