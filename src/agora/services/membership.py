"""Contributor-based community membership counting.

A user becomes a member of a community the first time they post or comment
in it. ``community.member_count`` is a denormalized count of those users; the
``community_contributor`` table records who has already been counted so each
(community, user) pair increments the count at most once.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, insert, select, union, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agora.models import Comment, Community, CommunityContributor, Post

logger = logging.getLogger(__name__)

__all__ = ["rebuild_member_counts", "record_contribution"]


class _CommunityMissingError(LookupError):
    """Raised inside the savepoint when the counter update matched no community."""


def record_contribution(db: Session, community_id: int, user_id: str) -> bool:
    """Count ``user_id`` as a member of ``community_id`` if not counted yet.

    Must be called after the post or comment itself has been committed. The
    contributor row and the counter update share one savepoint; a primary key
    conflict on the contributor row means the user was already counted.

    Never raises: any failure is logged and the count is left as is.

    Returns:
        True if ``member_count`` was incremented, False otherwise.
    """
    try:
        with db.begin_nested():
            db.execute(
                insert(CommunityContributor).values(
                    community_id=community_id,
                    user_id=user_id,
                )
            )
            result = db.execute(
                update(Community)
                .where(Community.id == community_id)
                .values(member_count=func.coalesce(Community.member_count, 0) + 1)
                .execution_options(synchronize_session="evaluate")
            )
            if result.rowcount != 1:
                # Leaving the block with an error discards the contributor row too.
                raise _CommunityMissingError(community_id)
    except IntegrityError:
        logger.debug("User %s already counted in community %s", user_id, community_id)
        return False
    except _CommunityMissingError:
        logger.warning(
            "Community %s not found; contribution of user %s ignored",
            community_id,
            user_id,
        )
        return False
    except Exception:
        logger.warning(
            "Failed to record contribution of user %s to community %s",
            user_id,
            community_id,
            exc_info=True,
        )
        return False

    try:
        db.commit()
    except Exception:
        logger.warning(
            "Failed to commit member count for community %s",
            community_id,
            exc_info=True,
        )
        try:
            db.rollback()
        except Exception:
            logger.warning("Rollback after failed member count commit also failed", exc_info=True)
        return False

    logger.debug("Counted user %s as new member of community %s", user_id, community_id)
    return True


def _contributor_ids(db: Session, community_id: int) -> set[str]:
    post_authors = select(Post.author_id).where(Post.community_id == community_id)
    comment_authors = (
        select(Comment.author_id)
        .join(Post, Post.id == Comment.post_id)
        .where(Post.community_id == community_id)
    )
    return set(db.scalars(union(post_authors, comment_authors)))


def rebuild_member_counts(db: Session) -> dict[int, int]:
    """Recompute every community's member count from its post/comment history.

    Contributor rows are backfilled (and stale ones dropped) so that later calls to
    ``record_contribution`` stay consistent with the recomputed counts.

    Returns:
        Mapping of community id to its recomputed member count.
    """
    counts: dict[int, int] = {}
    for community in db.scalars(select(Community).order_by(Community.id)).all():
        contributors = _contributor_ids(db, community.id)
        recorded = set(
            db.scalars(
                select(CommunityContributor.user_id).where(
                    CommunityContributor.community_id == community.id
                )
            )
        )
        for user_id in sorted(contributors - recorded):
            db.add(CommunityContributor(community_id=community.id, user_id=user_id))
        stale = recorded - contributors
        if stale:
            db.execute(
                delete(CommunityContributor).where(
                    CommunityContributor.community_id == community.id,
                    CommunityContributor.user_id.in_(stale),
                )
            )

        community.member_count = len(contributors)
        counts[community.id] = len(contributors)
        logger.info("Community %s: %d members", community.slug, len(contributors))

    db.commit()
    return counts
