# tests/test_cursor.py
"""Tests for the opaque paging cursor."""

import base64
import json
from datetime import UTC, datetime, timedelta

from forum_feed.services.cursor import (
    MAX_OFFSET,
    PAGE_SIZE,
    Cursor,
    advance,
    decode_cursor,
    encode_cursor,
    new_session,
    next_cursor_encoded,
)

SESSION_TIME = datetime(2026, 3, 1, 12, 30, tzinfo=UTC)


def test_missing_token_starts_new_session() -> None:
    cursor = decode_cursor(None, SESSION_TIME)
    assert cursor == Cursor(time=SESSION_TIME, offset=0)
    assert cursor.is_first_page


def test_token_preserves_time_and_offset() -> None:
    token = encode_cursor(Cursor(time=SESSION_TIME, offset=42))
    decoded = decode_cursor(token, SESSION_TIME + timedelta(days=3))
    assert decoded.time == SESSION_TIME
    assert decoded.offset == 42
    assert not decoded.is_first_page


def test_naive_time_is_treated_as_utc() -> None:
    naive = datetime(2026, 3, 1, 12, 30)
    assert new_session(naive).time == SESSION_TIME


def test_malformed_token_degrades_to_new_session() -> None:
    for token in ("not-a-cursor", "e30=", "eyJ0aW1lIjoxfQ=="):
        assert decode_cursor(token, SESSION_TIME) == new_session(SESSION_TIME)


def test_negative_offset_degrades_to_new_session() -> None:
    token = encode_cursor(Cursor(time=SESSION_TIME - timedelta(hours=1), offset=-21))
    assert decode_cursor(token, SESSION_TIME) == new_session(SESSION_TIME)


def test_advance_moves_offset_only() -> None:
    first = new_session(SESSION_TIME)
    second = advance(first)
    assert second.time == first.time
    assert second.offset == PAGE_SIZE
    assert advance(second, 5).offset == PAGE_SIZE + 5


def test_next_cursor_only_for_full_page() -> None:
    first = new_session(SESSION_TIME)
    assert next_cursor_encoded(first, PAGE_SIZE - 1) is None
    assert next_cursor_encoded(first, 0) is None

    token = next_cursor_encoded(first, PAGE_SIZE)
    assert token is not None
    assert decode_cursor(token) == Cursor(time=SESSION_TIME, offset=PAGE_SIZE)


def _token(payload: str) -> str:
    return base64.urlsafe_b64encode(payload.encode()).decode()


def test_non_integer_offset_degrades_to_new_session() -> None:
    for offset in ("1e999", "2.5", "true", '"3"', "null"):
        token = _token(f'{{"time":"2024-01-01T00:00:00+00:00","offset":{offset}}}')
        assert decode_cursor(token, SESSION_TIME) == new_session(SESSION_TIME)


def test_out_of_range_offset_degrades_to_new_session() -> None:
    time = SESSION_TIME.isoformat()
    too_far = _token(json.dumps({"time": time, "offset": MAX_OFFSET + 1}))
    huge = _token(json.dumps({"time": time, "offset": 10**30}))
    at_limit = _token(json.dumps({"time": time, "offset": MAX_OFFSET}))

    assert decode_cursor(too_far, SESSION_TIME) == new_session(SESSION_TIME)
    assert decode_cursor(huge, SESSION_TIME) == new_session(SESSION_TIME)
    assert decode_cursor(at_limit) == Cursor(time=SESSION_TIME, offset=MAX_OFFSET)
