"""Post-related endpoints for the Agora API."""

from fastapi import APIRouter, HTTPException, Response, status
from sqlalchemy.orm import Session

from agora.models import Community, Post
from agora.schemas.post import PostCreate, PostResponse
from agora.services import post_service

from ..dependencies import CurrentUserDep, SessionDep, SummarizerDep

router = APIRouter(prefix="/posts", tags=["posts"])


def _get_post_or_404(db: Session, post_id: int) -> Post:
    post = db.query(Post).filter(Post.id == post_id, Post.deleted.is_(False)).first()
    if post is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found"
        )
    return post


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, db: SessionDep) -> Post:
    """Get a specific post by ID, including any cached summary.

    Raises:
        HTTPException: If post not found or deleted
    """
    return _get_post_or_404(db, post_id)


@router.get("/{post_id}/summary", response_model=PostResponse)
async def get_post_with_summary(
    post_id: int,
    db: SessionDep,
    summarizer: SummarizerDep,
) -> PostResponse:
    """Get a post with an AI summary, regenerating it when stale.

    Summarization failures do not fail the request; the previously cached
    summary (or none) is returned instead.
    """
    post = _get_post_or_404(db, post_id)
    summary = await post_service.get_post_summary(db, post=post, summarizer=summarizer)
    response = PostResponse.model_validate(post)
    return response.model_copy(update={"ai_summary": summary})


@router.post("/",
          response_model=PostResponse,
          status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Post:
    """Create a new post in a community.

    Raises:
        HTTPException: If the community does not exist
    """
    community = db.get(Community, post_data.community_id)
    if community is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Community not found",
        )

    return post_service.create_post(
        db,
        author=current_user,
        community=community,
        title=post_data.title,
        body=post_data.body,
    )


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_post(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Response:
    """Soft-delete a post (author only).

    Raises:
        HTTPException: If post not found or user is not the author
    """
    post = _get_post_or_404(db, post_id)
    try:
        post_service.delete_post(db, post=post, user=current_user)
    except post_service.PermissionDeniedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
