"""Comment threads and flat comment listings."""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from forum_feed.core.errors import ValidationError
from forum_feed.db.time import utcnow
from forum_feed.models import Item, User
from forum_feed.models.item import PATH_SEPARATOR
from forum_feed.services import ranking
from forum_feed.services.cursor import PAGE_SIZE, decode_cursor, next_cursor_encoded
from forum_feed.services.tree import CommentNode, nest_comments

logger = logging.getLogger(__name__)

FLAT_COMMENT_SORTS = ("user", "top")

# Sorts rows whose parent is missing from the fetch after every placed row.
_ORPHAN_RANK = sys.maxsize


@dataclass
class CommentsPage:
    """One page of a flat comment listing."""

    comments: list[Item]
    cursor: str | None


def _flat_thread(
    db: Session,
    root: Item,
    sort: str | None,
    as_of: datetime,
    viewer_id: int | None,
) -> list[CommentNode]:
    """Fetch every descendant of ``root`` with its sibling rank in one query."""
    policy = ranking.comment_ranking(sort, as_of)
    sibling_rank = (
        func.row_number()
        .over(partition_by=Item.parent_id, order_by=policy.order_by)
        .label("sibling_rank")
    )
    stmt = select(Item, sibling_rank).where(
        Item.path.like(f"{root.path}{PATH_SEPARATOR}%"),
        ranking.active_or_mine(viewer_id),
    )
    stmt = policy.join(stmt)
    rows = db.execute(stmt).all()

    # Parents are shallower than their children, so visiting by depth means
    # a parent's sort path is always known before its children need it.
    rows = sorted(rows, key=lambda row: (row.Item.depth, row.sibling_rank))
    paths: dict[int, tuple[int, ...]] = {root.id: ()}
    nodes: list[CommentNode] = []
    for item, rank in rows:
        parent_path = paths.get(item.parent_id) if item.parent_id is not None else None
        if parent_path is None:
            sort_path = (_ORPHAN_RANK, rank)
        else:
            sort_path = parent_path + (rank,)
            paths[item.id] = sort_path
        nodes.append(CommentNode(item=item, sort_path=sort_path))
    nodes.sort(key=lambda node: node.sort_path)
    return nodes


def comment_tree(
    db: Session,
    root: Item,
    sort: str | None = None,
    *,
    viewer_id: int | None = None,
    as_of: datetime | None = None,
) -> list[CommentNode]:
    """Return the nested replies of ``root`` ordered by ``sort``.

    Raises:
        ValidationError: If ``sort`` is not a comment sort.
    """
    flat = _flat_thread(db, root, sort, as_of or utcnow(), viewer_id)
    tree, added = nest_comments(flat, root.id)
    if added != len(flat):
        logger.warning(
            "Dropped %d of %d comments under item %d that could not be placed",
            len(flat) - added,
            len(flat),
            root.id,
        )
    return tree


def list_flat_comments(
    db: Session,
    *,
    sort: str | None,
    cursor: str | None = None,
    name: str | None = None,
    within: str | None = None,
    now: datetime | None = None,
) -> CommentsPage:
    """Return a page of comments across threads.

    Raises:
        ValidationError: If ``sort`` is unknown, or ``sort="user"`` lacks ``name``.
    """
    decoded = decode_cursor(cursor, now)
    if sort == "user":
        if not name:
            raise ValidationError("must supply name", argument_name="name")
        user = db.scalar(select(User).where(User.name == name))
        if user is None:
            return CommentsPage(comments=[], cursor=None)
        policy = ranking.user_comments(decoded.time, user_id=user.id)
    elif sort == "top":
        policy = ranking.top_comments(decoded.time, within=within)
    else:
        raise ValidationError("invalid sort type", argument_name="sort")

    stmt = policy.apply(select(Item)).offset(decoded.offset).limit(PAGE_SIZE)
    comments = list(db.scalars(stmt).all())
    return CommentsPage(
        comments=comments,
        cursor=next_cursor_encoded(decoded, len(comments)),
    )
