"""Model recording @name mentions of users inside item text."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from forum_feed.db.session import Base
from forum_feed.db.time import utcnow


class Mention(Base):
    """A user named in an item's text."""

    __tablename__ = "mention"
    __table_args__ = (UniqueConstraint("item_id", "user_id", name="uq_mention_item_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("item.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
