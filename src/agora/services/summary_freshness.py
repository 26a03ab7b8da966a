"""Decide when a cached post summary has to be regenerated."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol

from agora.db.time import as_utc, utcnow

__all__ = [
    "SUMMARY_MAX_AGE",
    "SUMMARY_NEW_COMMENT_THRESHOLD",
    "SummarySnapshot",
    "new_comments_since_summary",
    "should_regenerate",
    "summary_age",
]

SUMMARY_MAX_AGE = timedelta(hours=24)
SUMMARY_NEW_COMMENT_THRESHOLD = 3


class SummarySnapshot(Protocol):
    """Fields of a post read by the freshness check."""

    ai_summary: str | None
    ai_summary_generated_at: datetime | None
    ai_summary_comment_count: int | None
    comment_count: int


def summary_age(post: SummarySnapshot, now: datetime | None = None) -> timedelta | None:
    """Return how long ago the cached summary was generated, if there is one."""
    if post.ai_summary_generated_at is None:
        return None
    current = as_utc(now) if now is not None else utcnow()
    return current - as_utc(post.ai_summary_generated_at)


def new_comments_since_summary(post: SummarySnapshot) -> int:
    """Return the number of comments added since the summary was generated."""
    return (post.comment_count or 0) - (post.ai_summary_comment_count or 0)


def should_regenerate(post: SummarySnapshot, *, now: datetime | None = None) -> bool:
    """Return True when the post's summary is missing or stale.

    A summary is stale once it is older than ``SUMMARY_MAX_AGE`` or once
    ``SUMMARY_NEW_COMMENT_THRESHOLD`` comments have been added since it was
    generated. Either condition alone is enough.

    Args:
        post: Object exposing the cached summary fields and the live comment count.
        now: Reference time; defaults to the current UTC time.
    """
    if post.ai_summary is None or post.ai_summary_generated_at is None:
        return True

    age = summary_age(post, now)
    if age is not None and age > SUMMARY_MAX_AGE:
        return True

    return new_comments_since_summary(post) >= SUMMARY_NEW_COMMENT_THRESHOLD
