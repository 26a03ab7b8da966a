"""Voting on posts and comments."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from agora.models import VOTE_TARGET_COMMENT, VOTE_TARGET_POST, Comment, Post, User, Vote

__all__ = ["VoteTargetNotFoundError", "cast_vote", "get_user_vote", "get_vote_count"]


class VoteTargetNotFoundError(LookupError):
    """Raised when voting on a post or comment that does not exist."""


def _get_target(db: Session, target_type: str, target_id: int) -> Post | Comment:
    if target_type == VOTE_TARGET_POST:
        target: Post | Comment | None = db.scalar(
            select(Post).where(Post.id == target_id, Post.deleted.is_(False))
        )
    elif target_type == VOTE_TARGET_COMMENT:
        target = db.get(Comment, target_id)
    else:
        raise ValueError(f"Unknown vote target type: {target_type}")

    if target is None:
        raise VoteTargetNotFoundError(f"{target_type.capitalize()} not found")
    return target


def _find_vote(db: Session, user_id: str, target_type: str, target_id: int) -> Vote | None:
    return db.scalar(
        select(Vote).where(
            Vote.user_id == user_id,
            Vote.target_type == target_type,
            Vote.target_id == target_id,
        )
    )


def cast_vote(
    db: Session,
    *,
    user: User,
    target_type: str,
    target_id: int,
    value: int,
) -> int:
    """Create, change or remove ``user``'s vote on a post or comment.

    A value of 1 or -1 sets the vote, 0 removes it. The target's denormalized
    ``vote_count`` moves by the difference between the new and old value.

    Returns:
        The target's updated vote count.
    """
    if value not in (1, -1, 0):
        raise ValueError("Vote value must be 1, -1, or 0")

    target = _get_target(db, target_type, target_id)
    existing = _find_vote(db, user.id, target_type, target_id)
    previous = existing.value if existing is not None else 0

    if value == 0:
        if existing is not None:
            db.delete(existing)
    elif existing is not None:
        existing.value = value
    else:
        db.add(Vote(user_id=user.id, target_type=target_type, target_id=target_id, value=value))

    target.vote_count = (target.vote_count or 0) + value - previous
    db.commit()
    return target.vote_count


def get_user_vote(db: Session, *, user: User, target_type: str, target_id: int) -> int:
    """Return ``user``'s current vote on a target, 0 when none."""
    vote = _find_vote(db, user.id, target_type, target_id)
    return vote.value if vote is not None else 0


def get_vote_count(db: Session, *, target_type: str, target_id: int) -> int:
    """Return the current score of a post or comment.

    Raises:
        VoteTargetNotFoundError: If the target does not exist.
    """
    return _get_target(db, target_type, target_id).vote_count or 0
