"""Service-level helpers for posts, comments and their cached summaries."""
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import case, delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agora.db.time import utcnow
from agora.models import Comment, Community, Post, User
from agora.services.membership import record_contribution
from agora.services.summarizer import (
    CommentDigest,
    SummarizerClient,
    SummarizerError,
    SummaryRequest,
)
from agora.services.summary_freshness import (
    new_comments_since_summary,
    should_regenerate,
    summary_age,
)

logger = logging.getLogger(__name__)

__all__ = [
    "ContentNotFoundError",
    "InvalidParentCommentError",
    "PermissionDeniedError",
    "create_comment",
    "create_post",
    "delete_comment",
    "delete_post",
    "get_post_summary",
    "reset_summaries",
    "update_comment",
]


class ContentNotFoundError(LookupError):
    """Raised when a referenced post or comment does not exist."""


class InvalidParentCommentError(ValueError):
    """Raised when a reply targets a comment from a different post."""


class PermissionDeniedError(PermissionError):
    """Raised when a user modifies content they do not own."""


def create_post(
    db: Session,
    *,
    author: User,
    community: Community,
    title: str,
    body: str | None,
) -> Post:
    """Persist a post and count its author as a community member.

    Args:
        db: Database session.
        author: User submitting the post.
        community: Community the post belongs to.
        title: Post title.
        body: Optional markdown body.

    Returns:
        The committed post.
    """
    post = Post(
        community_id=community.id,
        author_id=author.id,
        title=title,
        body=body,
    )
    db.add(post)
    db.commit()
    db.refresh(post)

    # Bookkeeping runs after the commit so it can never undo the post.
    record_contribution(db, community.id, author.id)
    return post


def delete_post(db: Session, *, post: Post, user: User) -> None:
    """Soft-delete a post owned by ``user``."""
    if post.author_id != user.id:
        raise PermissionDeniedError("You can only delete your own posts")
    post.deleted = True
    db.commit()


def create_comment(
    db: Session,
    *,
    author: User,
    post: Post,
    body: str,
    parent_comment_id: int | None = None,
) -> Comment:
    """Persist a comment, bump the post's comment count and record membership.

    Raises:
        ContentNotFoundError: If the parent comment does not exist.
        InvalidParentCommentError: If the parent comment belongs to another post.
    """
    if parent_comment_id is not None:
        parent = db.get(Comment, parent_comment_id)
        if parent is None:
            raise ContentNotFoundError("Parent comment not found")
        if parent.post_id != post.id:
            raise InvalidParentCommentError("Parent comment must be from the same post")

    comment = Comment(
        post_id=post.id,
        author_id=author.id,
        body=body,
        parent_comment_id=parent_comment_id,
    )
    db.add(comment)
    db.execute(
        update(Post)
        .where(Post.id == post.id)
        .values(comment_count=Post.comment_count + 1)
    )
    db.commit()
    db.refresh(comment)
    db.refresh(post)

    record_contribution(db, post.community_id, author.id)
    return comment


def update_comment(db: Session, *, comment: Comment, user: User, body: str) -> Comment:
    """Replace the body of a comment owned by ``user``."""
    if comment.author_id != user.id:
        raise PermissionDeniedError("Not authorized to update this comment")
    comment.body = body
    comment.updated_at = utcnow()
    db.commit()
    db.refresh(comment)
    return comment


def _comment_subtree_ids(db: Session, comment: Comment) -> list[int]:
    ids = [comment.id]
    frontier = [comment.id]
    while frontier:
        frontier = list(
            db.scalars(select(Comment.id).where(Comment.parent_comment_id.in_(frontier)))
        )
        ids.extend(frontier)
    return ids


def delete_comment(db: Session, *, comment: Comment, user: User) -> int:
    """Delete a comment owned by ``user`` together with all of its replies.

    The post's comment count drops by the number of removed comments.
    Membership counts are left untouched; there is no decrement path for them.

    Returns:
        Number of comments removed.
    """
    if comment.author_id != user.id:
        raise PermissionDeniedError("You can only delete your own comments")

    post_id = comment.post_id
    ids = _comment_subtree_ids(db, comment)
    removed = len(ids)
    db.execute(
        delete(Comment)
        .where(Comment.id.in_(ids))
        .execution_options(synchronize_session="evaluate")
    )
    db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(
            comment_count=case(
                (Post.comment_count > removed, Post.comment_count - removed),
                else_=0,
            )
        )
    )
    db.commit()
    logger.debug("Deleted %d comments from post %s", removed, post_id)
    return removed


def _load_comment_digests(db: Session, post_id: int) -> list[CommentDigest]:
    rows = db.execute(
        select(Comment, User.username)
        .join(User, User.id == Comment.author_id, isouter=True)
        .where(Comment.post_id == post_id)
        .order_by(Comment.vote_count.desc(), Comment.id)
    ).all()
    return [
        CommentDigest(
            body=comment.body,
            author=username or comment.author_id,
            vote_count=comment.vote_count or 0,
            created_at=comment.created_at,
        )
        for comment, username in rows
    ]


async def get_post_summary(
    db: Session,
    *,
    post: Post,
    summarizer: SummarizerClient,
    now: datetime | None = None,
) -> str | None:
    """Return a fresh or still-valid summary for ``post``.

    A new summary is generated only when ``should_regenerate`` says so and is
    cached on the post. When the summarization service fails the previously
    cached summary is returned, which may be None.
    """
    now = now or utcnow()

    if not should_regenerate(post, now=now):
        age = summary_age(post, now)
        logger.debug(
            "Using cached AI summary for post %s (age: %dh, new comments: %d)",
            post.id,
            int(age.total_seconds() // 3600) if age is not None else 0,
            new_comments_since_summary(post),
        )
        return post.ai_summary

    request = SummaryRequest(
        title=post.title,
        body=post.body or "",
        vote_count=post.vote_count or 0,
        comments=_load_comment_digests(db, post.id),
    )

    try:
        summary = await summarizer.summarize(request)
    except SummarizerError as exc:
        logger.warning("Failed to generate AI summary for post %s: %s", post.id, exc)
        return post.ai_summary

    post_id = post.id
    comment_count = post.comment_count or 0
    post.ai_summary = summary
    post.ai_summary_generated_at = now
    post.ai_summary_comment_count = comment_count
    try:
        db.commit()
    except SQLAlchemyError:
        logger.warning("Failed to cache AI summary for post %s", post_id, exc_info=True)
        db.rollback()
        return summary

    logger.info("AI summary cached for post %s (%d comments)", post_id, comment_count)
    return summary


def reset_summaries(db: Session) -> int:
    """Clear the cached summary of every post that has one.

    Returns:
        Number of posts whose summary was cleared.
    """
    result = db.execute(
        update(Post)
        .where(Post.ai_summary.is_not(None))
        .values(
            ai_summary=None,
            ai_summary_generated_at=None,
            ai_summary_comment_count=None,
        )
        .execution_options(synchronize_session="evaluate")
    )
    db.commit()
    return int(result.rowcount or 0)
