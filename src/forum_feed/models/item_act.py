"""Models capturing engagement actions on items."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from forum_feed.db.session import Base
from forum_feed.db.time import utcnow

ACT_VOTE = "VOTE"
ACT_BOOST = "BOOST"
ACT_TIP = "TIP"


class ItemAct(Base):
    """Sats spent by a user on an item.

    VOTE acts feed the organic ranking weight (scaled by the voter's trust),
    BOOST acts buy transient ranking, TIP acts only move sats.
    """

    __tablename__ = "item_act"
    __table_args__ = (
        Index("ix_item_act_item_id", "item_id"),
        Index("ix_item_act_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("item.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    act: Mapped[str] = mapped_column(Text, nullable=False)
    sats: Mapped[int] = mapped_column(Integer, nullable=False)
