# src/qa_forum/schemas/vote.py
"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class VoteCreate(BaseModel):
    """Schema for casting or toggling a vote."""

    item_type: Literal["question", "answer"] = Field(..., alias="itemType")
    item_id: int = Field(..., alias="itemId")
    direction: Literal["upvote", "downvote"]

    model_config = ConfigDict(populate_by_name=True)

    @property
    def direction_value(self) -> int:
        """Return 1 for upvotes and -1 for downvotes."""
        return 1 if self.direction == "upvote" else -1


class VoteSets(BaseModel):
    """Upvoter and downvoter account ids of an item."""

    upvotes: list[int]
    downvotes: list[int]


class VoteResponse(BaseModel):
    """Vote state of an item after a toggle."""

    item_type: str = Field(..., serialization_alias="itemType")
    item_id: int = Field(..., serialization_alias="itemId")
    votes: VoteSets
    upvote_count: int = Field(..., serialization_alias="upvoteCount")
    downvote_count: int = Field(..., serialization_alias="downvoteCount")
    score: int
    my_vote: int = Field(0, serialization_alias="myVote")
