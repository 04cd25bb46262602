"""Ranking policies for item feeds and comment threads.

Each policy is a pure function of the session time, the scope and the
window. It returns a :class:`Ranking`: the filter criteria, an optional
engagement aggregate to outer-join, and the ordering. Policies never touch
the database themselves; the feed and comment services apply them to a
``select(Item)`` and execute it.

Every engagement sum is bounded by the session time, so a ranking computed
on page three of a session sees exactly the votes page one saw.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import (
    DateTime,
    Float,
    Select,
    Subquery,
    and_,
    case,
    func,
    literal,
    or_,
    select,
)
from sqlalchemy.orm import aliased
from sqlalchemy.sql.elements import ColumnElement

from forum_feed.core.errors import ValidationError
from forum_feed.db.functions import greatest, hours_between
from forum_feed.db.time import as_utc
from forum_feed.models import Item, ItemAct, Pin, User
from forum_feed.models.item import ITEM_STATUS_ACTIVE
from forum_feed.models.item_act import ACT_BOOST, ACT_VOTE

__all__ = [
    "COMMENT_SORTS",
    "Ranking",
    "active_or_mine",
    "auction",
    "comment_hot_score",
    "comment_ranking",
    "engagement",
    "hot",
    "hot_score",
    "pinned",
    "recent",
    "top",
    "top_comments",
    "user_comments",
    "user_items",
    "window_start",
]

# Organic votes decay slowly, paid boosts fast.
VOTE_DECAY_EXPONENT = 1.3
BOOST_DECAY_EXPONENT = 4.0
# Keeps brand-new items from dividing by (nearly) zero.
AGE_OFFSET_HOURS = 2.0
# Only boost above this many sats counts, plus a small floor.
BOOST_BASELINE = 1000
BOOST_FLOOR = 5

COMMENT_SORTS = ("hot", "top", "recent")
WINDOWS = ("day", "week", "month", "year")


@dataclass(frozen=True)
class Ranking:
    """Filter, optional engagement join and ordering for one feed query."""

    name: str
    criteria: tuple[ColumnElement[bool], ...]
    order_by: tuple[Any, ...]
    engagement: Subquery | None = None

    def join(self, stmt: Select[Any]) -> Select[Any]:
        """Outer-join the engagement aggregate the ordering refers to, if any."""
        if self.engagement is None:
            return stmt
        return stmt.outerjoin(self.engagement, self.engagement.c.item_id == Item.id)

    def apply(self, stmt: Select[Any]) -> Select[Any]:
        """Return ``stmt`` filtered and ordered by this ranking."""
        return self.join(stmt).where(*self.criteria).order_by(*self.order_by)


def hot_score(weighted: float, boost: float, hours: float) -> float:
    """Return the hot score of an item ``hours`` old.

    Mirrors :func:`weighted_score` so the ordering can be reasoned about
    without a database.
    """
    age = max(hours, 0.0) + AGE_OFFSET_HOURS
    boost_term = max(boost - BOOST_BASELINE + BOOST_FLOOR, 0)
    return weighted / age**VOTE_DECAY_EXPONENT + boost_term / age**BOOST_DECAY_EXPONENT


def comment_hot_score(weighted: float, hours: float) -> float:
    """Return the hot score of a comment; boosts do not rank comments."""
    age = max(hours, 0.0) + AGE_OFFSET_HOURS
    return max(weighted, 0.0) / age**VOTE_DECAY_EXPONENT


def window_start(within: str | None, as_of: datetime) -> datetime | None:
    """Return the start of the ``within`` window ending at ``as_of``.

    ``None``, ``"all"`` and unrecognized windows mean no lower bound.
    """
    if within == "day":
        return as_of - timedelta(days=1)
    if within == "week":
        return as_of - timedelta(days=7)
    if within == "month":
        return _months_before(as_of, 1)
    if within == "year":
        return _months_before(as_of, 12)
    return None


def _months_before(moment: datetime, months: int) -> datetime:
    month_index = moment.year * 12 + moment.month - 1 - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def active_or_mine(viewer_id: int | None) -> ColumnElement[bool]:
    """Active items, plus the viewer's own items whatever their status."""
    if viewer_id is None:
        return Item.status == ITEM_STATUS_ACTIVE
    return or_(Item.status == ITEM_STATUS_ACTIVE, Item.user_id == viewer_id)


def in_scope(scope: str | None) -> ColumnElement[bool]:
    """Items of ``scope``; without one, the items outside every scope."""
    if scope:
        return Item.sub_name == scope
    return Item.sub_name.is_(None)


def engagement(as_of: datetime | None) -> Subquery:
    """Per-item engagement sums recorded at or before ``as_of``.

    ``weighted`` adds the voter's trust for each VOTE by someone other than
    the author; ``boost`` adds the sats of every BOOST.
    """
    author = aliased(Item)
    voter = aliased(User)
    stmt = (
        select(
            ItemAct.item_id.label("item_id"),
            func.sum(
                case(
                    (
                        and_(ItemAct.act == ACT_VOTE, ItemAct.user_id != author.user_id),
                        voter.trust,
                    ),
                    else_=0.0,
                )
            ).label("weighted"),
            func.sum(
                case((ItemAct.act == ACT_BOOST, ItemAct.sats), else_=0)
            ).label("boost"),
        )
        .join(author, author.id == ItemAct.item_id)
        .join(voter, voter.id == ItemAct.user_id)
        .group_by(ItemAct.item_id)
    )
    if as_of is not None:
        stmt = stmt.where(ItemAct.created_at <= as_of)
    return stmt.subquery("engagement")


def _age(as_of: datetime) -> ColumnElement[float]:
    anchor = literal(as_utc(as_of), DateTime(timezone=True))
    return hours_between(anchor, Item.created_at) + AGE_OFFSET_HOURS


def _weighted(eng: Subquery) -> ColumnElement[float]:
    return func.coalesce(eng.c.weighted, 0.0)


def weighted_score(eng: Subquery, as_of: datetime) -> ColumnElement[float]:
    """SQL form of :func:`hot_score` over the ``eng`` aggregate."""
    age = _age(as_of)
    boost = greatest(func.coalesce(eng.c.boost, 0) - BOOST_BASELINE + BOOST_FLOOR, 0)
    return (
        _weighted(eng) / func.power(age, VOTE_DECAY_EXPONENT, type_=Float)
        + boost / func.power(age, BOOST_DECAY_EXPONENT, type_=Float)
    )


def _root_criteria(
    as_of: datetime, viewer_id: int | None, scope: str | None
) -> tuple[ColumnElement[bool], ...]:
    return (
        Item.parent_id.is_(None),
        Item.created_at <= as_of,
        in_scope(scope),
        active_or_mine(viewer_id),
    )


def recent(as_of: datetime, *, scope: str | None = None, viewer_id: int | None = None) -> Ranking:
    """Root items, newest first."""
    return Ranking(
        name="recent",
        criteria=_root_criteria(as_of, viewer_id, scope),
        order_by=(Item.created_at.desc(), Item.id.desc()),
    )


def top(
    as_of: datetime,
    *,
    within: str | None = None,
    scope: str | None = None,
    viewer_id: int | None = None,
) -> Ranking:
    """Root items in ``within`` by trust-weighted votes, newest first on ties."""
    eng = engagement(as_of)
    criteria = _root_criteria(as_of, viewer_id, scope) + (Item.pin_id.is_(None),)
    start = window_start(within, as_of)
    if start is not None:
        criteria += (Item.created_at >= start,)
    return Ranking(
        name="top",
        criteria=criteria,
        order_by=(_weighted(eng).desc(), Item.created_at.desc(), Item.id.desc()),
        engagement=eng,
    )


def hot(
    as_of: datetime,
    *,
    scope: str | None = None,
    viewer_id: int | None = None,
    since: datetime | None = None,
) -> Ranking:
    """Root items by age-decayed weighted score.

    ``since`` restricts candidates to items created after it; the feed uses
    it for the cheap first-page pass.
    """
    eng = engagement(as_of)
    criteria = _root_criteria(as_of, viewer_id, scope) + (Item.pin_id.is_(None),)
    if since is not None:
        criteria += (Item.created_at > since,)
    return Ranking(
        name="hot",
        criteria=criteria,
        order_by=(weighted_score(eng, as_of).desc(), Item.id.desc()),
        engagement=eng,
    )


def auction(as_of: datetime, *, scope: str, viewer_id: int | None = None) -> Ranking:
    """Items of an auction scope by bid; equal bids keep first-come order."""
    return Ranking(
        name="auction",
        criteria=_root_criteria(as_of, viewer_id, scope) + (Item.pin_id.is_(None),),
        order_by=(Item.max_bid.desc().nulls_last(), Item.created_at.asc(), Item.id.asc()),
    )


def user_items(as_of: datetime, *, user_id: int, viewer_id: int | None = None) -> Ranking:
    """A user's own root items, newest first."""
    return Ranking(
        name="user",
        criteria=(
            Item.user_id == user_id,
            Item.parent_id.is_(None),
            Item.created_at <= as_of,
            Item.pin_id.is_(None),
            active_or_mine(viewer_id),
        ),
        order_by=(Item.created_at.desc(), Item.id.desc()),
    )


def user_comments(as_of: datetime, *, user_id: int) -> Ranking:
    """A user's comments anywhere, newest first."""
    return Ranking(
        name="user",
        criteria=(
            Item.user_id == user_id,
            Item.parent_id.is_not(None),
            Item.created_at <= as_of,
        ),
        order_by=(Item.created_at.desc(), Item.id.desc()),
    )


def top_comments(as_of: datetime, *, within: str | None = None) -> Ranking:
    """Comments anywhere by trust-weighted votes."""
    eng = engagement(as_of)
    criteria: tuple[ColumnElement[bool], ...] = (
        Item.parent_id.is_not(None),
        Item.created_at <= as_of,
    )
    start = window_start(within, as_of)
    if start is not None:
        criteria += (Item.created_at >= start,)
    return Ranking(
        name="top",
        criteria=criteria,
        order_by=(_weighted(eng).desc(), Item.created_at.desc(), Item.id.desc()),
        engagement=eng,
    )


def comment_ranking(sort: str | None, as_of: datetime) -> Ranking:
    """Sibling order of comments inside one thread.

    The ordering is evaluated per parent, so it only ever compares siblings.

    Raises:
        ValidationError: If ``sort`` is not one of :data:`COMMENT_SORTS`.
    """
    sort = sort or "hot"
    if sort not in COMMENT_SORTS:
        raise ValidationError("invalid sort type", argument_name="sort")

    if sort == "recent":
        return Ranking(
            name=sort,
            criteria=(),
            order_by=(Item.created_at.desc(), Item.path.asc()),
        )

    eng = engagement(as_of)
    if sort == "top":
        order_by: tuple[Any, ...] = (
            _weighted(eng).desc(),
            Item.created_at.desc(),
            Item.path.asc(),
        )
    else:
        score = greatest(_weighted(eng), 0.0) / func.power(
            _age(as_of), VOTE_DECAY_EXPONENT, type_=Float
        )
        order_by = (score.desc(), Item.path.asc(), Item.id.desc())
    return Ranking(name=sort, criteria=(), order_by=order_by, engagement=eng)


def pinned(as_of: datetime, *, scope: str | None = None) -> Select[tuple[Item]]:
    """Statement for the newest active item of every pin group, by position."""
    newest = (
        func.row_number()
        .over(
            partition_by=Item.pin_id,
            order_by=(Item.created_at.desc(), Item.id.desc()),
        )
        .label("pin_rank")
    )
    ranked = (
        select(Item.id.label("id"), newest)
        .where(
            Item.pin_id.is_not(None),
            Item.status == ITEM_STATUS_ACTIVE,
            Item.created_at <= as_of,
            in_scope(scope),
        )
        .subquery("ranked_pins")
    )
    return (
        select(Item)
        .join(ranked, ranked.c.id == Item.id)
        .join(Pin, Pin.id == Item.pin_id)
        .where(ranked.c.pin_rank == 1)
        .order_by(Pin.position.asc(), Item.id.asc())
    )
