"""Wallet history: a merged, cursor-paged view of money in and out.

This is a read path over invoices, withdrawals, item acts and earnings;
creating or settling any of them happens elsewhere.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import (
    BigInteger,
    DateTime,
    Integer,
    Select,
    Text,
    and_,
    case,
    cast,
    func,
    literal_column,
    null,
    or_,
    select,
    type_coerce,
)
from sqlalchemy.orm import Session

from forum_feed.core.errors import AuthenticationError
from forum_feed.models import Earn, Invoice, Item, ItemAct, User, Withdrawal
from forum_feed.models.item_act import ACT_BOOST
from forum_feed.models.withdrawal import WITHDRAWAL_STATUS_CONFIRMED
from forum_feed.schemas.wallet import Fact
from forum_feed.services.cursor import Cursor, decode_cursor, next_cursor_encoded
from forum_feed.services.merge import merged_page

logger = logging.getLogger(__name__)

FACT_TYPES = ("invoice", "withdrawal", "stacked", "spent")
TIEBREAK = ("type", "fact_id")


@dataclass
class WalletPage:
    facts: list[Fact]
    cursor: str | None


def get_invoice(db: Session, invoice_id: int, viewer: User | None) -> Invoice | None:
    """Return one of the viewer's invoices.

    Raises:
        AuthenticationError: If there is no viewer or the invoice is someone else's.
    """
    if viewer is None:
        raise AuthenticationError("you must be logged in")
    invoice = db.get(Invoice, invoice_id)
    if invoice is None:
        return None
    if invoice.user_id != viewer.id:
        raise AuthenticationError("not ur invoice")
    return invoice


def _columns(
    fact_type: str,
    fact_id: Any,
    created_at: Any,
    msats: Any,
    msats_fee: Any,
    status: Any,
    bolt11: Any,
) -> tuple[Any, ...]:
    return (
        literal_column(f"'{fact_type}'", Text).label("type"),
        cast(fact_id, Integer).label("fact_id"),
        type_coerce(created_at, DateTime(timezone=True)).label("created_at"),
        cast(msats, BigInteger).label("msats"),
        cast(msats_fee, BigInteger).label("msats_fee"),
        cast(status, Text).label("status"),
        cast(bolt11, Text).label("bolt11"),
    )


def invoice_branch(user: User, as_of: datetime) -> Select[Any]:
    status = case(
        (Invoice.confirmed_at.is_not(None), "CONFIRMED"),
        (Invoice.expires_at <= as_of, "EXPIRED"),
        (Invoice.cancelled.is_(True), "CANCELLED"),
        else_="PENDING",
    )
    return select(
        *_columns(
            "invoice",
            Invoice.id,
            Invoice.created_at,
            func.coalesce(Invoice.msats_received, Invoice.msats_requested),
            null(),
            status,
            Invoice.bolt11,
        )
    ).where(Invoice.user_id == user.id, Invoice.created_at <= as_of)


def withdrawal_branch(user: User, as_of: datetime) -> Select[Any]:
    confirmed = Withdrawal.status == WITHDRAWAL_STATUS_CONFIRMED
    return select(
        *_columns(
            "withdrawal",
            Withdrawal.id,
            Withdrawal.created_at,
            case((confirmed, Withdrawal.msats_paid), else_=Withdrawal.msats_paying),
            case((confirmed, Withdrawal.msats_fee_paid), else_=Withdrawal.msats_fee_paying),
            func.coalesce(Withdrawal.status, "PENDING"),
            Withdrawal.bolt11,
        )
    ).where(Withdrawal.user_id == user.id, Withdrawal.created_at <= as_of)


def stacked_branch(user: User, as_of: datetime) -> Select[Any]:
    """Sats received on the user's items (or forwarded to the user), per item."""
    return (
        select(
            *_columns(
                "stacked",
                Item.id,
                func.max(ItemAct.created_at),
                func.sum(ItemAct.sats) * 1000,
                0,
                null(),
                null(),
            )
        )
        .select_from(ItemAct)
        .join(Item, ItemAct.item_id == Item.id)
        .where(
            ItemAct.user_id != user.id,
            ItemAct.act != ACT_BOOST,
            or_(
                and_(Item.user_id == user.id, Item.fwd_user_id.is_(None)),
                and_(Item.fwd_user_id == user.id, ItemAct.user_id != Item.user_id),
            ),
            ItemAct.created_at <= as_of,
        )
        .group_by(Item.id)
    )


def earn_branch(user: User, as_of: datetime) -> Select[Any]:
    return select(
        *_columns("earn", Earn.id, Earn.created_at, Earn.msats, 0, null(), null())
    ).where(Earn.user_id == user.id, Earn.created_at <= as_of)


def spent_branch(user: User, as_of: datetime) -> Select[Any]:
    """Sats the user spent on items, per item."""
    return (
        select(
            *_columns(
                "spent",
                Item.id,
                func.max(ItemAct.created_at),
                func.sum(ItemAct.sats) * 1000,
                0,
                null(),
                null(),
            )
        )
        .select_from(ItemAct)
        .join(Item, ItemAct.item_id == Item.id)
        .where(ItemAct.user_id == user.id, ItemAct.created_at <= as_of)
        .group_by(Item.id)
    )


def _branches(include: set[str], user: User, as_of: datetime) -> list[Select[Any]]:
    branches: list[Select[Any]] = []
    if "invoice" in include:
        branches.append(invoice_branch(user, as_of))
    if "withdrawal" in include:
        branches.append(withdrawal_branch(user, as_of))
    if "stacked" in include:
        branches.append(stacked_branch(user, as_of))
        branches.append(earn_branch(user, as_of))
    if "spent" in include:
        branches.append(spent_branch(user, as_of))
    return branches


def _to_fact(row: Any) -> Fact:
    fact = Fact.model_validate(dict(row._mapping))
    if fact.type == "withdrawal":
        fact.msats = -fact.msats - (fact.msats_fee or 0)
    elif fact.type == "spent":
        fact.msats = -fact.msats
    return fact


def fetch_history(db: Session, user: User, cursor: Cursor, include: set[str]) -> list[Fact]:
    branches = _branches(include, user, cursor.time)
    rows = merged_page(db, branches, cursor, sort_key="created_at", tiebreak=TIEBREAK)
    return [_to_fact(row) for row in rows]


def list_wallet_history(
    db: Session,
    viewer: User | None,
    cursor: str | None = None,
    inc: str | None = None,
    *,
    now: datetime | None = None,
) -> WalletPage:
    """Return one page of the viewer's wallet history.

    ``inc`` is a comma separated subset of :data:`FACT_TYPES`; with none of
    them the page is empty.

    Raises:
        AuthenticationError: If there is no viewer.
    """
    if viewer is None:
        raise AuthenticationError("you must be logged in")
    decoded = decode_cursor(cursor, now)
    include = {part.strip() for part in (inc or "").split(",") if part.strip()}
    include &= set(FACT_TYPES)
    if not include:
        return WalletPage(facts=[], cursor=None)

    facts = fetch_history(db, viewer, decoded, include)
    logger.debug(
        "Wallet history for user %d: %d facts from %s", viewer.id, len(facts), sorted(include)
    )
    return WalletPage(facts=facts, cursor=next_cursor_encoded(decoded, len(facts)))
