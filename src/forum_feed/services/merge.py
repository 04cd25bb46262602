"""Merge several ranked sub-queries into one cursor-paged stream.

Used by the notification feed and the wallet history: each source is a
``select`` with identically named columns, capped to the rows the merged
page could possibly need, then unioned and windowed by the cursor.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import Row, Select, select, union_all
from sqlalchemy.orm import Session

from forum_feed.services.cursor import PAGE_SIZE, Cursor


def _ordering(columns: Any, sort_key: str, tiebreak: Sequence[str]) -> list[Any]:
    return [columns[sort_key].desc()] + [columns[name].asc() for name in tiebreak]


def capped(
    branch: Select[Any],
    cap: int | None,
    sort_key: str,
    tiebreak: Sequence[str] = (),
) -> Select[Any]:
    """Return ``branch`` limited to its first ``cap`` rows, newest first.

    The result is wrapped in a plain ``SELECT ... FROM (...)`` so it can
    take part in a UNION on databases that reject ORDER BY/LIMIT inside
    compound members.
    """
    inner = branch.subquery()
    limited = select(*inner.c).order_by(*_ordering(inner.c, sort_key, tiebreak))
    if cap is not None:
        limited = limited.limit(cap)
    outer = limited.subquery()
    return select(*outer.c)


def merged_page(
    db: Session,
    branches: Sequence[Select[Any]],
    cursor: Cursor,
    *,
    sort_key: str,
    tiebreak: Sequence[str] = (),
    page_size: int = PAGE_SIZE,
) -> list[Row[Any]]:
    """Return one page of the union of ``branches`` ordered by ``sort_key`` desc.

    A merged window of ``page_size`` rows at ``cursor.offset`` can never use
    more than ``page_size + offset`` rows from a single branch, so each
    branch is cut there before the union.
    """
    if not branches:
        return []
    cap = page_size + cursor.offset
    members = [capped(branch, cap, sort_key, tiebreak) for branch in branches]
    if len(members) == 1:
        merged = members[0].subquery("merged")
    else:
        merged = union_all(*members).subquery("merged")
    stmt = (
        select(merged)
        .order_by(*_ordering(merged.c, sort_key, tiebreak))
        .offset(cursor.offset)
        .limit(page_size)
    )
    return list(db.execute(stmt).all())
