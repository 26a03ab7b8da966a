"""Models capturing voting interactions on posts and comments."""

from sqlalchemy import (
    CheckConstraint,
    Index,
    Integer,
    SmallInteger,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from agora.db.session import Base

VOTE_TARGET_POST = "post"
VOTE_TARGET_COMMENT = "comment"


class Vote(Base):
    """Per-user vote on a post or a comment."""

    __tablename__ = "vote"
    __table_args__ = (
        CheckConstraint("value IN (1, -1)", name="ck_vote_value"),
        CheckConstraint("target_type IN ('post', 'comment')", name="ck_vote_target_type"),
        # One vote per user per target.
        UniqueConstraint("user_id", "target_type", "target_id", name="uq_vote_user_target"),
        Index("ix_vote_target", "target_type", "target_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    target_type: Mapped[str] = mapped_column(String(16), nullable=False)
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)

    # 1 = upvote, -1 = downvote.
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)
