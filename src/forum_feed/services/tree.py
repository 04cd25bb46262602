"""Rebuild nested comment threads from a flat, depth-first row sequence.

Threads are fetched in one query and ordered by each row's ``sort_path``
(the sibling ranks of every ancestor, root first). In that order every
subtree is contiguous and immediately follows its own root, which lets the
nesting be restored in a single pass.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

from forum_feed.models import Item


class TreeRow(Protocol):
    """Anything with an id, a parent id and a list of child rows."""

    id: int
    parent_id: int | None
    comments: list


RowT = TypeVar("RowT", bound=TreeRow)


@dataclass
class CommentNode:
    """A comment row together with its nested replies."""

    item: Item
    sort_path: tuple[int, ...] = ()
    comments: list[CommentNode] = field(default_factory=list)

    @property
    def id(self) -> int:
        return self.item.id

    @property
    def parent_id(self) -> int | None:
        return self.item.parent_id


def nest_comments(
    flat: Sequence[RowT], parent_id: int, start: int = 0
) -> tuple[list[RowT], int]:
    """Nest the rows of ``flat`` from ``start`` on that belong under ``parent_id``.

    Rows whose parent is ``parent_id`` become direct children. Any other row
    must be a descendant of the most recently placed child, so the walk
    recurses into that child and resumes after whatever the recursion
    consumed. A row that fits neither case ends this subtree.

    Returns:
        The direct children (with their ``comments`` filled in) and the
        number of rows consumed. Every row is visited once across the
        whole recursion.
    """
    result: list[RowT] = []
    added = 0
    i = start
    while i < len(flat):
        row = flat[i]
        if row.parent_id == parent_id:
            result.append(row)
            added += 1
            i += 1
        elif result:
            last = result[-1]
            nested, nested_added = nest_comments(flat, last.id, i)
            if nested_added == 0:
                break
            last.comments.extend(nested)
            i += nested_added
            added += nested_added
        else:
            break
    return result, added
