"""Vote-related endpoints for the Agora API."""

from typing import Literal

from fastapi import APIRouter, HTTPException, status

from agora.schemas.vote import VoteCountResponse, VoteCreate, VoteResponse
from agora.services.vote_service import (
    VoteTargetNotFoundError,
    cast_vote,
    get_user_vote,
    get_vote_count,
)

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/votes", tags=["votes"])


@router.post("/", response_model=VoteResponse)
async def vote(
    vote_data: VoteCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> VoteResponse:
    """Upvote, downvote, or remove a vote on a post or comment."""
    try:
        vote_count = cast_vote(
            db,
            user=current_user,
            target_type=vote_data.target_type,
            target_id=vote_data.target_id,
            value=vote_data.value,
        )
    except VoteTargetNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return VoteResponse(vote_count=vote_count, user_vote=vote_data.value)


@router.get("/{target_type}/{target_id}/mine")
async def get_my_vote(
    target_type: Literal["post", "comment"],
    target_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, int]:
    """Get current user's vote on a specific post or comment."""
    value = get_user_vote(db, user=current_user, target_type=target_type, target_id=target_id)
    return {"value": value}


@router.get("/{target_type}/{target_id}", response_model=VoteCountResponse)
async def get_votes(
    target_type: Literal["post", "comment"],
    target_id: int,
    db: SessionDep,
) -> VoteCountResponse:
    """Get the current score of a post or comment; no authentication required."""
    try:
        vote_count = get_vote_count(db, target_type=target_type, target_id=target_id)
    except VoteTargetNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return VoteCountResponse(target_type=target_type, target_id=target_id, vote_count=vote_count)
