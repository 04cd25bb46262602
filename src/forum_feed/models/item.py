# src/forum_feed/models/item.py
"""SQLAlchemy model for items: posts, comments and jobs."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from forum_feed.db.session import Base
from forum_feed.db.time import utcnow

ITEM_STATUS_ACTIVE = "ACTIVE"
ITEM_STATUS_PENDING = "PENDING"
ITEM_STATUS_STOPPED = "STOPPED"

PATH_SEPARATOR = "."


class Item(Base):
    """A node in the item forest.

    Root items (posts and jobs) have no parent; comments hang below them.
    ``path`` is the materialized root-to-node chain of ids, e.g. ``"1.4.9"``,
    assigned by the write path together with the id.
    """

    __tablename__ = "item"
    __table_args__ = (
        Index("ix_item_parent_id", "parent_id"),
        Index("ix_item_created_at", "created_at"),
        Index("ix_item_path", "path"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    text: Mapped[str | None] = mapped_column(Text, nullable=True)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)

    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    # Sats earned by the item are forwarded to this user when set.
    fwd_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )

    parent_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("item.id"), nullable=True
    )
    pin_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("pin.id"), nullable=True)
    sub_name: Mapped[str | None] = mapped_column(
        Text, ForeignKey("sub.name"), nullable=True
    )

    # Job fields; max_bid is only set on auction items.
    max_bid: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    company: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    remote: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    status: Mapped[str] = mapped_column(Text, nullable=False, default=ITEM_STATUS_ACTIVE)
    status_updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    path: Mapped[str] = mapped_column(Text, nullable=False)

    @property
    def depth(self) -> int:
        """Return the number of path segments (1 for a root item)."""
        return len(self.path.split(PATH_SEPARATOR))

    @property
    def root_id(self) -> int:
        """Return the id of the root item this item belongs to."""
        return int(self.path.split(PATH_SEPARATOR, 1)[0])
