"""Community-related endpoints for the Agora API."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Response, status
from sqlalchemy import desc
from sqlalchemy.orm import Session

from agora.models import Community, Post
from agora.schemas.community import CommunityCreate, CommunityResponse, CommunityUpdate
from agora.schemas.post import PostResponse
from agora.services import community_service
from agora.services.post_service import PermissionDeniedError

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/communities", tags=["communities"])


def _get_community_or_404(db: Session, slug: str) -> Community:
    community = db.query(Community).filter(Community.slug == slug).first()
    if community is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Community not found"
        )
    return community


@router.get("/", response_model=list[CommunityResponse])
async def list_communities(db: SessionDep) -> list[Community]:
    """List all communities, largest first."""
    return (
        db.query(Community)
        .order_by(desc(Community.member_count), Community.id)
        .all()
    )


@router.get("/{slug}", response_model=CommunityResponse)
async def get_community(slug: str, db: SessionDep) -> Community:
    """Get a specific community by slug."""
    return _get_community_or_404(db, slug)


@router.post("/",
          response_model=CommunityResponse,
          status_code=status.HTTP_201_CREATED)
async def create_community(
    community_data: CommunityCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Community:
    """Create a new community.

    Creating a community does not make the creator a member; membership
    starts with the first post or comment.
    """
    existing = db.query(Community).filter(Community.slug == community_data.slug).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Community slug already exists"
        )

    new_community = Community(
        slug=community_data.slug,
        name=community_data.name,
        description=community_data.description,
        created_by=current_user.id,
        member_count=0,
    )
    db.add(new_community)
    db.commit()
    db.refresh(new_community)
    return new_community


@router.put("/{slug}", response_model=CommunityResponse)
async def update_community(
    slug: str,
    community_data: CommunityUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Community:
    """Edit a community's name or description (creator only)."""
    community = _get_community_or_404(db, slug)
    try:
        return community_service.update_community(
            db,
            community=community,
            user=current_user,
            name=community_data.name,
            description=community_data.description,
        )
    except PermissionDeniedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc


@router.delete(
    "/{slug}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_community(
    slug: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Response:
    """Delete a community and everything posted in it (creator only)."""
    community = _get_community_or_404(db, slug)
    try:
        community_service.delete_community(db, community=community, user=current_user)
    except PermissionDeniedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{slug}/posts", response_model=list[PostResponse])
async def get_community_posts(
    slug: str,
    db: SessionDep,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> list[Post]:
    """Get posts from a specific community, newest first."""
    community = _get_community_or_404(db, slug)
    return (
        db.query(Post)
        .filter(Post.community_id == community.id, Post.deleted.is_(False))
        .order_by(desc(Post.created_at), desc(Post.id))
        .offset(offset)
        .limit(limit)
        .all()
    )
