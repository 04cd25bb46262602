"""Opaque pagination cursors shared by every feed.

A cursor freezes the session's ``time`` on the first page and only moves
``offset`` forward afterwards, so rows written while a reader is paging can
never shift pages that were already served.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, replace
from datetime import datetime

from forum_feed.core.settings import settings
from forum_feed.db.time import as_utc, utcnow

logger = logging.getLogger(__name__)

PAGE_SIZE = settings.page_size
# Largest offset a cursor may carry; anything beyond no database could page to.
MAX_OFFSET = 2**31 - 1


@dataclass(frozen=True)
class Cursor:
    """Decoded paging state: the session's as-of time and the row offset."""

    time: datetime
    offset: int = 0

    @property
    def is_first_page(self) -> bool:
        return self.offset == 0


def new_session(now: datetime | None = None) -> Cursor:
    """Return the cursor of a fresh paging session."""
    return Cursor(time=as_utc(now) if now is not None else utcnow(), offset=0)


def encode_cursor(cursor: Cursor) -> str:
    """Serialize ``cursor`` into a URL-safe opaque token."""
    payload = {"time": as_utc(cursor.time).isoformat(), "offset": cursor.offset}
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def decode_cursor(token: str | None, now: datetime | None = None) -> Cursor:
    """Parse ``token``; a missing or malformed token starts a new session."""
    if not token:
        return new_session(now)
    try:
        raw = base64.urlsafe_b64decode(token.encode("ascii"))
        payload = json.loads(raw.decode("utf-8"))
        time = as_utc(datetime.fromisoformat(payload["time"]))
        offset = payload["offset"]
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError):
        logger.debug("Discarding malformed cursor %r", token)
        return new_session(now)
    if isinstance(offset, bool) or not isinstance(offset, int):
        logger.debug("Discarding cursor with non-integer offset %r", offset)
        return new_session(now)
    if not 0 <= offset <= MAX_OFFSET:
        logger.debug("Discarding cursor with out-of-range offset %d", offset)
        return new_session(now)
    return Cursor(time=time, offset=offset)


def advance(cursor: Cursor, page_size: int = PAGE_SIZE) -> Cursor:
    """Return the cursor of the next page in the same session."""
    return replace(cursor, offset=cursor.offset + page_size)


def next_cursor_encoded(
    cursor: Cursor, page_length: int, page_size: int = PAGE_SIZE
) -> str | None:
    """Return the next page's token, or None when this page was not full."""
    if page_length < page_size:
        return None
    return encode_cursor(advance(cursor, page_size))
