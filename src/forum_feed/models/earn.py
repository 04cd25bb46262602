"""Model for periodic reward payouts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from forum_feed.db.session import Base
from forum_feed.db.time import utcnow


class Earn(Base):
    """Millisats a user earned from the daily reward pool."""

    __tablename__ = "earn"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    msats: Mapped[int] = mapped_column(BigInteger, nullable=False)
