"""SQLAlchemy model for scopes (named sub-communities)."""
from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from forum_feed.db.session import Base

RANKING_TYPE_WIRE = "WIRE"
RANKING_TYPE_AUCTION = "AUCTION"


class Sub(Base):
    """A named partition of the item namespace with its own default ranking."""

    __tablename__ = "sub"

    name: Mapped[str] = mapped_column(Text, primary_key=True)
    # WIRE ranks by weighted score, AUCTION by the items' maximum bid.
    ranking_type: Mapped[str] = mapped_column(Text, nullable=False, default=RANKING_TYPE_WIRE)
    base_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
