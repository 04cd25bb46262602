# src/forum_feed/models/user.py
"""SQLAlchemy models for forum users and their notification preferences."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Float, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from forum_feed.db.session import Base
from forum_feed.db.time import utcnow


class User(Base):
    """A forum account.

    ``trust`` weighs the account's votes in every weighted ranking;
    ``checked_notes_at`` is the last time the notification feed was opened.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    trust: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    msats: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    # Set when the account signed up through someone's invite link.
    invite_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    checked_notes_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Notification preferences.
    note_all_descendants: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    note_item_sats: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    note_mentions: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    note_deposits: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    note_invites: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    note_earning: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
