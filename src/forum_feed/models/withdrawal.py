"""Model for outgoing withdrawals (read side only)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from forum_feed.db.session import Base
from forum_feed.db.time import utcnow

WITHDRAWAL_STATUS_CONFIRMED = "CONFIRMED"


class Withdrawal(Base):
    """A payment out of a user's balance.

    ``status`` stays NULL while the payment is in flight.
    """

    __tablename__ = "withdrawal"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    hash: Mapped[str] = mapped_column(Text, nullable=False)
    bolt11: Mapped[str] = mapped_column(Text, nullable=False)
    msats_paying: Mapped[int] = mapped_column(BigInteger, nullable=False)
    msats_paid: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    msats_fee_paying: Mapped[int] = mapped_column(BigInteger, nullable=False)
    msats_fee_paid: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    status: Mapped[str | None] = mapped_column(Text, nullable=True)
