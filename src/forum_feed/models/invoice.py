"""Model for deposit invoices (read side only)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from forum_feed.db.session import Base
from forum_feed.db.time import utcnow


class Invoice(Base):
    """A deposit request; ``confirmed_at`` is set once it has been paid."""

    __tablename__ = "invoice"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    hash: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    bolt11: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    confirmed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    msats_requested: Mapped[int] = mapped_column(BigInteger, nullable=False)
    msats_received: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    cancelled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
