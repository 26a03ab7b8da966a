"""Comment-related endpoints for the Agora API."""

from fastapi import APIRouter, HTTPException, Query, Response, status

from agora.models import Comment, Post
from agora.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from agora.services import post_service

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/post/{post_id}", response_model=list[CommentResponse])
async def list_post_comments(
    post_id: int,
    db: SessionDep,
    limit: int = Query(100, ge=1, le=500),
) -> list[Comment]:
    """List comments on a post, oldest first."""
    return (
        db.query(Comment)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at, Comment.id)
        .limit(limit)
        .all()
    )


@router.post("/",
          response_model=CommentResponse,
          status_code=status.HTTP_201_CREATED)
async def create_comment(
    comment_data: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Comment:
    """Create a new comment or reply.

    Raises:
        HTTPException: If the post or parent comment does not exist, or the
                      parent comment belongs to another post
    """
    post = db.query(Post).filter(
        Post.id == comment_data.post_id,
        Post.deleted.is_(False),
    ).first()
    if post is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )

    try:
        return post_service.create_comment(
            db,
            author=current_user,
            post=post,
            body=comment_data.body,
            parent_comment_id=comment_data.parent_comment_id,
        )
    except post_service.ContentNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except post_service.InvalidParentCommentError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.put("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: int,
    comment_data: CommentUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Comment:
    """Edit a comment (author only)."""
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found",
        )

    try:
        return post_service.update_comment(
            db, comment=comment, user=current_user, body=comment_data.body
        )
    except post_service.PermissionDeniedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc


@router.delete(
    "/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_comment(
    comment_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Response:
    """Delete a comment (author only)."""
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found",
        )

    try:
        post_service.delete_comment(db, comment=comment, user=current_user)
    except post_service.PermissionDeniedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
