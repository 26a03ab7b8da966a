"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class VoteCreate(BaseModel):
    """Schema for casting, changing or removing a vote."""

    target_type: Literal["post", "comment"]
    target_id: int
    value: Literal[-1, 0, 1] = Field(..., description="1 upvote, -1 downvote, 0 removes the vote")


class VoteResponse(BaseModel):
    """Vote state after a vote was applied."""

    vote_count: int
    user_vote: int


class VoteCountResponse(BaseModel):
    """Current score of a post or comment."""

    target_type: Literal["post", "comment"]
    target_id: int
    vote_count: int
