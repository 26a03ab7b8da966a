"""SQLAlchemy models for communities and their contributors."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agora.db.session import Base
from agora.db.time import utcnow


class Community(Base):
    """Community metadata used for grouping posts."""

    __tablename__ = "community"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("app_user.id"),
        nullable=True,
    )
    # Distinct users who ever posted or commented here; maintained incrementally.
    member_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class CommunityContributor(Base):
    """One row per (community, user) pair that has contributed content.

    The composite primary key is what guarantees a user is counted once.
    """

    __tablename__ = "community_contributor"

    community_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("community.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("app_user.id", ondelete="CASCADE"),
        primary_key=True,
    )
