"""Assemble ranked, cursor-paged item feeds."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from forum_feed.core.errors import ValidationError
from forum_feed.core.settings import settings
from forum_feed.models import Item, Sub, User
from forum_feed.models.sub import RANKING_TYPE_AUCTION
from forum_feed.services import ranking
from forum_feed.services.cursor import PAGE_SIZE, Cursor, decode_cursor, next_cursor_encoded

logger = logging.getLogger(__name__)

ITEM_SORTS = ("hot", "recent", "top", "user")


@dataclass(frozen=True)
class RankingContext:
    """What the caller asked for: sort, scope, top window and user name."""

    sort: str | None = None
    scope: str | None = None
    within: str | None = None
    name: str | None = None


@dataclass
class ItemsPage:
    """One page of a feed; ``pins`` is only set on the first default page."""

    items: list[Item]
    pins: list[Item] | None
    cursor: str | None


def _page(db: Session, policy: ranking.Ranking, cursor: Cursor) -> list[Item]:
    stmt = policy.apply(select(Item)).offset(cursor.offset).limit(PAGE_SIZE)
    return list(db.scalars(stmt).all())


def _hot_page(
    db: Session, cursor: Cursor, scope: str | None, viewer_id: int | None
) -> list[Item]:
    if cursor.is_first_page:
        # Most first pages fill up from recent items alone, which spares
        # scoring the whole table.
        since = cursor.time - timedelta(days=settings.hot_window_days)
        items = _page(
            db,
            ranking.hot(cursor.time, scope=scope, viewer_id=viewer_id, since=since),
            cursor,
        )
        if len(items) == PAGE_SIZE:
            return items
        logger.debug(
            "Hot window since %s gave %d items, falling back to all time",
            since.isoformat(),
            len(items),
        )
    return _page(db, ranking.hot(cursor.time, scope=scope, viewer_id=viewer_id), cursor)


def list_items(
    db: Session,
    context: RankingContext,
    viewer_id: int | None = None,
    cursor: str | None = None,
    *,
    now: datetime | None = None,
) -> ItemsPage:
    """Return one page of root items ranked per ``context``.

    An unknown scope or user name gives an empty feed.

    Raises:
        ValidationError: If the sort is unknown, or ``sort="user"`` has no name.
    """
    decoded = decode_cursor(cursor, now)
    sort = context.sort
    if sort is not None and sort not in ITEM_SORTS:
        raise ValidationError("invalid sort type", argument_name="sort")
    if sort == "user" and not context.name:
        raise ValidationError("must supply name", argument_name="name")

    empty = ItemsPage(items=[], pins=None, cursor=None)
    sub: Sub | None = None
    if context.scope:
        sub = db.get(Sub, context.scope)
        if sub is None:
            logger.debug("Unknown scope %r, returning an empty feed", context.scope)
            return empty

    pins: list[Item] | None = None
    if sort == "user":
        user = db.scalar(select(User).where(User.name == context.name))
        if user is None:
            return empty
        items = _page(
            db, ranking.user_items(decoded.time, user_id=user.id, viewer_id=viewer_id), decoded
        )
    elif sort == "recent":
        items = _page(
            db, ranking.recent(decoded.time, scope=context.scope, viewer_id=viewer_id), decoded
        )
    elif sort == "top":
        policy = ranking.top(
            decoded.time, within=context.within, scope=context.scope, viewer_id=viewer_id
        )
        items = _page(db, policy, decoded)
    elif sub is not None and sub.ranking_type == RANKING_TYPE_AUCTION:
        items = _page(
            db, ranking.auction(decoded.time, scope=sub.name, viewer_id=viewer_id), decoded
        )
    else:
        items = _hot_page(db, decoded, context.scope, viewer_id)
        if decoded.is_first_page:
            pins = list(db.scalars(ranking.pinned(decoded.time, scope=context.scope)).all())

    return ItemsPage(
        items=items,
        pins=pins,
        cursor=next_cursor_encoded(decoded, len(items)),
    )


def list_all_items(
    db: Session, cursor: str | None = None, *, now: datetime | None = None
) -> ItemsPage:
    """Every item, comments included, newest first."""
    decoded = decode_cursor(cursor, now)
    stmt = (
        select(Item)
        .where(Item.created_at <= decoded.time)
        .order_by(Item.created_at.desc(), Item.id.desc())
        .offset(decoded.offset)
        .limit(PAGE_SIZE)
    )
    items = list(db.scalars(stmt).all())
    return ItemsPage(items=items, pins=None, cursor=next_cursor_encoded(decoded, len(items)))
