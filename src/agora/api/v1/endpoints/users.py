"""User profile and content listing endpoints for the Agora API."""

from typing import Literal

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import desc
from sqlalchemy.orm import Session

from agora.models import Comment, Community, CommunityContributor, Post, User
from agora.schemas.comment import CommentResponse
from agora.schemas.community import CommunityResponse
from agora.schemas.post import PostResponse
from agora.schemas.user import UserResponse

from ..dependencies import SessionDep

router = APIRouter(prefix="/users", tags=["users"])


def _get_user_or_404(db: Session, username: str) -> User:
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user


@router.get("/{username}", response_model=UserResponse)
async def get_user(username: str, db: SessionDep) -> User:
    """Get a user's public profile."""
    return _get_user_or_404(db, username)


@router.get("/{username}/posts", response_model=list[PostResponse])
async def get_user_posts(
    username: str,
    db: SessionDep,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> list[Post]:
    """List a user's posts, newest first."""
    user = _get_user_or_404(db, username)
    return (
        db.query(Post)
        .filter(Post.author_id == user.id, Post.deleted.is_(False))
        .order_by(desc(Post.created_at), desc(Post.id))
        .offset(offset)
        .limit(limit)
        .all()
    )


@router.get("/{username}/comments", response_model=list[CommentResponse])
async def get_user_comments(
    username: str,
    db: SessionDep,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> list[Comment]:
    """List a user's comments, newest first."""
    user = _get_user_or_404(db, username)
    return (
        db.query(Comment)
        .filter(Comment.author_id == user.id)
        .order_by(desc(Comment.created_at), desc(Comment.id))
        .offset(offset)
        .limit(limit)
        .all()
    )


@router.get("/{username}/communities", response_model=list[CommunityResponse])
async def get_user_communities(
    username: str,
    db: SessionDep,
    relation: Literal["member", "creator"] = Query("member"),
) -> list[Community]:
    """List the communities a user contributed to, or those they created."""
    user = _get_user_or_404(db, username)
    query = db.query(Community)
    if relation == "creator":
        query = query.filter(Community.created_by == user.id)
    else:
        query = query.join(
            CommunityContributor,
            CommunityContributor.community_id == Community.id,
        ).filter(CommunityContributor.user_id == user.id)
    return query.order_by(desc(Community.created_at), desc(Community.id)).all()
