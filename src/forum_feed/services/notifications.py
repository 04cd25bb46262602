"""The merged, cursor-paged notification feed.

Each enabled source contributes one branch with the columns ``id``,
``sort_time``, ``earned_sats`` and ``type``. Branches are capped, unioned
and windowed by :func:`forum_feed.services.merge.merged_page`.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import (
    BigInteger,
    DateTime,
    Select,
    Text,
    cast,
    func,
    literal_column,
    null,
    or_,
    select,
    type_coerce,
)
from sqlalchemy.orm import Session, aliased

from forum_feed.core.errors import AuthenticationError
from forum_feed.db.time import utcnow
from forum_feed.models import Earn, Invite, Invoice, Item, ItemAct, Mention, User
from forum_feed.models.item import ITEM_STATUS_STOPPED, PATH_SEPARATOR
from forum_feed.models.item_act import ACT_BOOST
from forum_feed.schemas import notification as schemas
from forum_feed.services.cursor import Cursor, decode_cursor, next_cursor_encoded
from forum_feed.services.merge import merged_page
from forum_feed.services.wallet import get_invoice

logger = logging.getLogger(__name__)

# Merged-stream tiebreak after sort_time desc.
TIEBREAK = ("id", "type")


class Source(str, enum.Enum):
    """Notification sources, named after the event type they produce."""

    REPLY = "Reply"
    JOB_CHANGED = "JobChanged"
    VOTIFICATION = "Votification"
    MENTION = "Mention"
    INVOICE_PAID = "InvoicePaid"
    INVITIFICATION = "Invitification"


@dataclass
class NotificationsPage:
    notifications: list[schemas.Notification]
    earn: schemas.Earn | None
    last_checked: datetime | None
    cursor: str | None


def enabled_sources(user: User, inc: str | None = None) -> list[Source]:
    """Sources ``user`` receives; ``inc="replies"`` narrows to replies only."""
    if inc == "replies":
        return [Source.REPLY]
    sources = [Source.REPLY, Source.JOB_CHANGED]
    if user.note_item_sats:
        sources.append(Source.VOTIFICATION)
    if user.note_mentions:
        sources.append(Source.MENTION)
    if user.note_deposits:
        sources.append(Source.INVOICE_PAID)
    if user.note_invites:
        sources.append(Source.INVITIFICATION)
    return sources


def _columns(id_col: Any, sort_time: Any, earned_sats: Any, source: Source) -> tuple[Any, ...]:
    return (
        id_col.label("id"),
        type_coerce(sort_time, DateTime(timezone=True)).label("sort_time"),
        cast(earned_sats, BigInteger).label("earned_sats"),
        literal_column(f"'{source.value}'", Text).label("type"),
    )


def reply_branch(user: User, as_of: datetime) -> Select[Any]:
    """Replies by others under the user's items.

    With ``note_all_descendants`` any depth below the user's items counts,
    otherwise only direct children.
    """
    parent = aliased(Item)
    if user.note_all_descendants:
        onclause = Item.path.like(parent.path.concat(f"{PATH_SEPARATOR}%"))
    else:
        onclause = Item.parent_id == parent.id
    return (
        select(*_columns(Item.id, Item.created_at, null(), Source.REPLY))
        .select_from(Item)
        .join(parent, onclause)
        .where(
            parent.user_id == user.id,
            Item.user_id != user.id,
            Item.created_at <= as_of,
        )
        .distinct()
    )


def job_changed_branch(user: User, as_of: datetime) -> Select[Any]:
    """The user's jobs whose status changed, except to stopped."""
    return select(
        *_columns(Item.id, Item.status_updated_at, null(), Source.JOB_CHANGED)
    ).where(
        Item.user_id == user.id,
        Item.max_bid.is_not(None),
        Item.status != ITEM_STATUS_STOPPED,
        Item.status_updated_at <= as_of,
    )


def votification_branch(user: User, as_of: datetime) -> Select[Any]:
    """Sats others spent on the user's items, one row per item."""
    return (
        select(
            *_columns(
                Item.id,
                func.max(ItemAct.created_at),
                func.sum(ItemAct.sats),
                Source.VOTIFICATION,
            )
        )
        .select_from(Item)
        .join(ItemAct, ItemAct.item_id == Item.id)
        .where(
            ItemAct.user_id != user.id,
            ItemAct.created_at <= as_of,
            ItemAct.act != ACT_BOOST,
            Item.user_id == user.id,
        )
        .group_by(Item.id)
    )


def mention_branch(user: User, as_of: datetime) -> Select[Any]:
    """Mentions of the user by others, except in replies to the user's own items."""
    parent = aliased(Item)
    return (
        select(*_columns(Item.id, Mention.created_at, null(), Source.MENTION))
        .select_from(Mention)
        .join(Item, Mention.item_id == Item.id)
        .outerjoin(parent, Item.parent_id == parent.id)
        .where(
            Mention.user_id == user.id,
            Mention.created_at <= as_of,
            Item.user_id != user.id,
            or_(parent.user_id.is_(None), parent.user_id != user.id),
        )
    )


def invoice_paid_branch(user: User, as_of: datetime) -> Select[Any]:
    """The user's confirmed deposits."""
    return select(
        *_columns(
            Invoice.id,
            Invoice.confirmed_at,
            Invoice.msats_received // 1000,
            Source.INVOICE_PAID,
        )
    ).where(
        Invoice.user_id == user.id,
        Invoice.confirmed_at.is_not(None),
        Invoice.confirmed_at <= as_of,
    )


def invitification_branch(user: User, as_of: datetime) -> Select[Any]:
    """Signups through the user's invites, one row per invite."""
    invitee = aliased(User)
    return (
        select(
            *_columns(Invite.id, func.max(invitee.created_at), null(), Source.INVITIFICATION)
        )
        .select_from(Invite)
        .join(invitee, invitee.invite_id == Invite.id)
        .where(Invite.user_id == user.id, invitee.created_at <= as_of)
        .group_by(Invite.id)
    )


BRANCHES = {
    Source.REPLY: reply_branch,
    Source.JOB_CHANGED: job_changed_branch,
    Source.VOTIFICATION: votification_branch,
    Source.MENTION: mention_branch,
    Source.INVOICE_PAID: invoice_paid_branch,
    Source.INVITIFICATION: invitification_branch,
}


def earnings_since(db: Session, user: User, since: datetime | None) -> schemas.Earn | None:
    """Sum the user's earnings from ``since`` on; None unless the total is positive."""
    stmt = select(
        func.max(Earn.id),
        func.max(Earn.created_at),
        func.sum(Earn.msats),
    ).where(Earn.user_id == user.id)
    if since is not None:
        stmt = stmt.where(Earn.created_at >= since)
    earn_id, sort_time, msats = db.execute(stmt).one()
    if msats is None:
        return None
    earned_sats = int(msats) // 1000
    if earned_sats <= 0:
        return None
    return schemas.Earn(id=earn_id, sort_time=sort_time, earned_sats=earned_sats)


def fetch_notifications(
    db: Session, user: User, cursor: Cursor, sources: list[Source]
) -> list[schemas.Notification]:
    """Return the merged page of ``sources`` at ``cursor``."""
    branches = [BRANCHES[source](user, cursor.time) for source in sources]
    rows = merged_page(db, branches, cursor, sort_key="sort_time", tiebreak=TIEBREAK)
    return [schemas.notification_adapter.validate_python(dict(row._mapping)) for row in rows]


def list_notifications(
    db: Session,
    viewer: User | None,
    cursor: str | None = None,
    inc: str | None = None,
    *,
    now: datetime | None = None,
) -> NotificationsPage:
    """Return one page of the viewer's notifications.

    On the first page of a session the viewer's ``checked_notes_at`` moves
    to now and, if the viewer wants it, the earnings since the previous
    check are summarized in ``earn``.

    Raises:
        AuthenticationError: If there is no viewer.
    """
    if viewer is None:
        raise AuthenticationError("you must be logged in")
    decoded = decode_cursor(cursor, now)
    sources = enabled_sources(viewer, inc)
    notifications = fetch_notifications(db, viewer, decoded, sources)

    last_checked = viewer.checked_notes_at
    earn: schemas.Earn | None = None
    if decoded.is_first_page:
        if viewer.note_earning:
            earn = earnings_since(db, viewer, last_checked)
        viewer.checked_notes_at = now or utcnow()
        db.commit()
        logger.info("User %d checked notifications at %s", viewer.id, viewer.checked_notes_at)

    return NotificationsPage(
        notifications=notifications,
        earn=earn,
        last_checked=last_checked,
        cursor=next_cursor_encoded(decoded, len(notifications)),
    )


def resolve_entity(db: Session, note: schemas.Notification, viewer: User) -> Any:
    """Load the entity a notification points at."""
    if isinstance(note, (schemas.Reply, schemas.Votification, schemas.Mention, schemas.JobChanged)):
        return db.get(Item, note.id)
    if isinstance(note, schemas.InvoicePaid):
        return get_invoice(db, note.id, viewer)
    if isinstance(note, schemas.Invitification):
        return db.get(Invite, note.id)
    return None
