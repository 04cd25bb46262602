"""SQLAlchemy model for pin groups."""
from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from forum_feed.db.session import Base


class Pin(Base):
    """A recurring pinned slot; the newest item holding it is the one shown."""

    __tablename__ = "pin"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    cron: Mapped[str | None] = mapped_column(Text, nullable=True)
