"""SQLAlchemy model for posts and their cached AI summaries."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agora.db.session import Base
from agora.db.time import utcnow


class Post(Base):
    """Top-level content entity submitted to a community."""

    __tablename__ = "post"
    __table_args__ = (
        Index("ix_post_community_author", "community_id", "author_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    community_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("community.id"),
        nullable=False,
    )
    author_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("app_user.id"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)

    vote_count: Mapped[int] = mapped_column(default=0, nullable=False)
    comment_count: Mapped[int] = mapped_column(default=0, nullable=False)

    # Cached summary; the three columns are written and cleared together.
    ai_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_summary_generated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    ai_summary_comment_count: Mapped[int | None] = mapped_column(Integer, nullable=True)

    deleted: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
