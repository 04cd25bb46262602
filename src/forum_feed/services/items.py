"""Single-item lookups and the engagement aggregates derived from item acts."""
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from forum_feed.models import Item, ItemAct, Pin
from forum_feed.models.item import ITEM_STATUS_ACTIVE, PATH_SEPARATOR
from forum_feed.models.item_act import ACT_BOOST, ACT_TIP, ACT_VOTE


@dataclass
class ItemStats:
    """Aggregates shown next to an item."""

    sats: int
    upvotes: int
    boost: int
    me_sats: int
    ncomments: int


def get_item(db: Session, item_id: int) -> Item | None:
    """Return the item with ``item_id``, if any."""
    return db.get(Item, item_id)


def _sum_sats(db: Session, *criteria) -> int:
    total = db.scalar(select(func.coalesce(func.sum(ItemAct.sats), 0)).where(*criteria))
    return int(total or 0)


def item_stats(db: Session, item: Item, viewer_id: int | None = None) -> ItemStats:
    """Compute the engagement aggregates of ``item`` as seen by ``viewer_id``."""
    # sats and upvotes only count what other users spent
    sats = _sum_sats(
        db, ItemAct.item_id == item.id, ItemAct.user_id != item.user_id, ItemAct.act != ACT_BOOST
    )
    upvotes = _sum_sats(
        db, ItemAct.item_id == item.id, ItemAct.user_id != item.user_id, ItemAct.act == ACT_VOTE
    )
    boost = _sum_sats(db, ItemAct.item_id == item.id, ItemAct.act == ACT_BOOST)
    me_sats = 0
    if viewer_id is not None:
        me_sats = _sum_sats(
            db,
            ItemAct.item_id == item.id,
            ItemAct.user_id == viewer_id,
            or_(ItemAct.act == ACT_TIP, ItemAct.act == ACT_VOTE),
        )
    return ItemStats(
        sats=sats,
        upvotes=upvotes,
        boost=boost,
        me_sats=me_sats,
        ncomments=count_descendants(db, item),
    )


def count_descendants(db: Session, item: Item) -> int:
    """Number of items anywhere below ``item``."""
    total = db.scalar(
        select(func.count(Item.id)).where(Item.path.like(f"{item.path}{PATH_SEPARATOR}%"))
    )
    return int(total or 0)


def get_root(db: Session, item: Item) -> Item | None:
    """The root item of ``item``'s thread, or None for a root item."""
    if item.parent_id is None:
        return None
    return db.get(Item, item.root_id)


def pin_position(db: Session, item: Item) -> int | None:
    """Position of the pin slot ``item`` occupies, if it is pinned."""
    if item.pin_id is None:
        return None
    pin = db.get(Pin, item.pin_id)
    return pin.position if pin is not None else None


def prior_pinned(db: Session, item: Item) -> int | None:
    """Id of the item that held the same pin before ``item``."""
    if item.pin_id is None:
        return None
    return db.scalar(
        select(Item.id)
        .where(Item.pin_id == item.pin_id, Item.created_at < item.created_at)
        .order_by(Item.created_at.desc(), Item.id.desc())
        .limit(1)
    )


def auction_position(
    db: Session, sub_name: str, bid: int, exclude_id: int | None = None
) -> int:
    """Rank a bid of ``bid`` would take among the active items of ``sub_name``."""
    criteria = [
        Item.sub_name == sub_name,
        Item.status == ITEM_STATUS_ACTIVE,
        Item.max_bid >= bid,
    ]
    if exclude_id is not None:
        criteria.append(Item.id != exclude_id)
    ahead = db.scalar(select(func.count(Item.id)).where(*criteria))
    return int(ahead or 0) + 1
