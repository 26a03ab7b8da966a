"""SQLAlchemy model for identities mirrored from the identity provider."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agora.db.session import Base
from agora.db.time import utcnow


class User(Base):
    """Local profile keyed by the identity provider's subject identifier."""

    __tablename__ = "app_user"

    # Subject claim (a UUID) issued by the identity provider.
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
