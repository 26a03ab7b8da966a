"""Administrative maintenance commands.

Both commands run against the configured database in a single session:

- ``agora-reset-summaries`` clears every cached AI summary so they are
  regenerated on next view.
- ``agora-rebuild-member-counts`` recomputes community member counts from
  post and comment history.
"""
from __future__ import annotations

import argparse
import logging
import sys

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from agora.db.session import SessionLocal
from agora.models import Post
from agora.services.membership import rebuild_member_counts
from agora.services.post_service import reset_summaries

logger = logging.getLogger(__name__)


def reset_summaries_main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Delete all cached AI post summaries")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report how many posts have a cached summary",
    )
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        cached = db.scalar(
            select(func.count(Post.id)).where(Post.ai_summary.is_not(None))
        ) or 0
        print(f"Found {cached} posts with AI summaries")
        if args.dry_run or cached == 0:
            return 0
        reset = reset_summaries(db)
        print(f"Deleted AI summaries from {reset} posts")
    except SQLAlchemyError as exc:
        logger.error("Failed to reset AI summaries: %s", exc)
        return 1
    finally:
        db.close()
    return 0


def rebuild_member_counts_main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Recompute community member counts from post and comment history",
    )
    parser.parse_args(argv)

    db = SessionLocal()
    try:
        counts = rebuild_member_counts(db)
    except SQLAlchemyError as exc:
        logger.error("Failed to rebuild member counts: %s", exc)
        return 1
    finally:
        db.close()

    print(f"Populated member counts for {len(counts)} communities")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    commands = {
        "reset-summaries": reset_summaries_main,
        "rebuild-member-counts": rebuild_member_counts_main,
    }
    if len(sys.argv) < 2 or sys.argv[1] not in commands:
        print(f"usage: python -m agora.scripts.maintenance {{{','.join(commands)}}} ...")
        sys.exit(2)
    sys.exit(commands[sys.argv[1]](sys.argv[2:]))
