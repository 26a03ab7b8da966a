"""Community maintenance operations restricted to the community creator."""
from __future__ import annotations

import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from agora.models import (
    VOTE_TARGET_COMMENT,
    VOTE_TARGET_POST,
    Comment,
    Community,
    CommunityContributor,
    Post,
    User,
    Vote,
)
from agora.services.post_service import PermissionDeniedError

logger = logging.getLogger(__name__)

__all__ = ["delete_community", "update_community"]


def _require_creator(community: Community, user: User, action: str) -> None:
    if community.created_by != user.id:
        raise PermissionDeniedError(f"Only the community creator can {action} it")


def update_community(
    db: Session,
    *,
    community: Community,
    user: User,
    name: str | None = None,
    description: str | None = None,
) -> Community:
    """Change the name and/or description of a community.

    Raises:
        PermissionDeniedError: If ``user`` did not create the community.
    """
    _require_creator(community, user, "update")
    if name is not None:
        community.name = name
    if description is not None:
        community.description = description
    db.commit()
    db.refresh(community)
    return community


def delete_community(db: Session, *, community: Community, user: User) -> None:
    """Delete a community with all of its posts, comments, votes and contributor rows.

    Raises:
        PermissionDeniedError: If ``user`` did not create the community.
    """
    _require_creator(community, user, "delete")

    post_ids = select(Post.id).where(Post.community_id == community.id)
    comment_ids = select(Comment.id).where(Comment.post_id.in_(post_ids))

    db.execute(
        delete(Vote)
        .where(
            or_(
                (Vote.target_type == VOTE_TARGET_POST) & Vote.target_id.in_(post_ids),
                (Vote.target_type == VOTE_TARGET_COMMENT) & Vote.target_id.in_(comment_ids),
            )
        )
        .execution_options(synchronize_session=False)
    )
    db.execute(
        delete(Comment)
        .where(Comment.post_id.in_(post_ids))
        .execution_options(synchronize_session=False)
    )
    db.execute(
        delete(Post)
        .where(Post.community_id == community.id)
        .execution_options(synchronize_session=False)
    )
    db.execute(
        delete(CommunityContributor)
        .where(CommunityContributor.community_id == community.id)
        .execution_options(synchronize_session=False)
    )
    slug = community.slug
    db.delete(community)
    db.commit()
    logger.info("Community %s deleted", slug)
