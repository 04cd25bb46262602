# tests/services/test_notifications.py
"""Tests for the merged notification feed."""

from datetime import timedelta

import pytest

from forum_feed.core.errors import AuthenticationError
from forum_feed.models import Invoice, Item
from forum_feed.models.item import ITEM_STATUS_STOPPED
from forum_feed.services.cursor import (
    PAGE_SIZE,
    Cursor,
    encode_cursor,
    new_session,
    next_cursor_encoded,
)
from forum_feed.services.merge import merged_page
from forum_feed.services.notifications import (
    TIEBREAK,
    Source,
    enabled_sources,
    list_notifications,
    reply_branch,
    resolve_entity,
    votification_branch,
)


def _types(page) -> list[str]:
    return [note.type for note in page.notifications]


def test_enabled_sources_follow_preferences(forum) -> None:
    everything = forum.user()
    quiet = forum.user(
        note_item_sats=False, note_mentions=False, note_deposits=False, note_invites=False
    )

    assert enabled_sources(everything) == list(Source)
    assert enabled_sources(quiet) == [Source.REPLY, Source.JOB_CHANGED]
    assert enabled_sources(everything, "replies") == [Source.REPLY]


def test_sources_merge_newest_first(db_session, forum, test_user, other_user, now) -> None:
    root = forum.item(test_user, hours=30)
    voted_a = forum.item(test_user, hours=30)
    voted_b = forum.item(test_user, hours=30)
    replies = [forum.item(other_user, parent=root, hours=hours) for hours in (10, 13, 15)]
    forum.act(other_user, voted_a, hours=11, sats=3)
    forum.act(other_user, voted_b, hours=14, sats=4)

    page = list_notifications(db_session, test_user, now=now)

    assert _types(page) == ["Reply", "Votification", "Reply", "Votification", "Reply"]
    assert [note.id for note in page.notifications] == [
        replies[0].id,
        voted_a.id,
        replies[1].id,
        voted_b.id,
        replies[2].id,
    ]
    assert page.notifications[1].earned_sats == 3
    assert page.cursor is None


def test_equal_times_page_deterministically(
    db_session, forum, test_user, other_user, now
) -> None:
    root = forum.item(test_user, hours=30)
    reply = forum.item(other_user, parent=root, hours=3)
    forum.act(other_user, root, hours=3, sats=5)
    branches = [reply_branch(test_user, now), votification_branch(test_user, now)]

    cursor = new_session(now)
    first = merged_page(
        db_session, branches, cursor, sort_key="sort_time", tiebreak=TIEBREAK, page_size=1
    )
    second = merged_page(
        db_session,
        branches,
        Cursor(time=now, offset=1),
        sort_key="sort_time",
        tiebreak=TIEBREAK,
        page_size=1,
    )

    assert len(first) == 1
    assert next_cursor_encoded(cursor, len(first), page_size=1) is not None
    assert {(row.type, row.id) for row in first + second} == {
        ("Reply", reply.id),
        ("Votification", root.id),
    }
    # root was created before the reply, so its id sorts first
    assert first[0].type == "Votification"


def test_pages_cover_every_notification_once(
    db_session, forum, test_user, other_user, now
) -> None:
    root = forum.item(test_user, hours=200)
    expected = []
    for k in range(25):
        reply = forum.item(other_user, parent=root, hours=2 * k + 1)
        expected.append((2 * k + 1, "Reply", reply.id))
    for k in range(20):
        voted = forum.item(test_user, hours=200)
        forum.act(other_user, voted, hours=2 * k + 2)
        expected.append((2 * k + 2, "Votification", voted.id))
    expected.sort()
    assert len(expected) > 2 * PAGE_SIZE

    seen = []
    lengths = []
    token = None
    while True:
        page = list_notifications(db_session, test_user, token, now=now)
        seen.extend((note.type, note.id) for note in page.notifications)
        lengths.append(len(page.notifications))
        token = page.cursor
        if token is None:
            break

    assert lengths == [PAGE_SIZE, PAGE_SIZE, len(expected) - 2 * PAGE_SIZE]
    assert seen == [(kind, note_id) for _, kind, note_id in expected]
    assert len(set(seen)) == len(seen)


def test_replies_exclude_own_and_respect_depth_preference(
    db_session, forum, test_user, other_user, now
) -> None:
    root = forum.item(test_user, hours=10)
    child = forum.item(other_user, parent=root, hours=9)
    grandchild = forum.item(forum.user(), parent=child, hours=8)
    forum.item(test_user, parent=child, hours=7)

    page = list_notifications(db_session, test_user, inc="replies", now=now)
    assert [note.id for note in page.notifications] == [grandchild.id, child.id]

    test_user.note_all_descendants = False
    page = list_notifications(db_session, test_user, inc="replies", now=now)
    assert [note.id for note in page.notifications] == [child.id]


def test_mentions_outside_own_threads(db_session, forum, test_user, other_user, now) -> None:
    own_root = forum.item(test_user, hours=10)
    elsewhere = forum.item(other_user, hours=6)
    reply = forum.item(other_user, parent=own_root, hours=5)
    forum.mention(elsewhere, test_user, hours=6)
    forum.mention(reply, test_user, hours=5)

    page = list_notifications(db_session, test_user, now=now)

    assert [(note.type, note.id) for note in page.notifications] == [
        ("Reply", reply.id),
        ("Mention", elsewhere.id),
    ]
    assert page.notifications[1].mention is True


def test_deposits_invites_and_job_changes(db_session, forum, test_user, other_user, now) -> None:
    paid = forum.invoice(
        test_user, hours=4, confirmed_at=now - timedelta(hours=2), msats_received=12_345_000
    )
    forum.invoice(test_user, hours=4)
    invite = forum.invite(test_user)
    forum.user(invite_id=invite.id, created_at=now - timedelta(hours=5))
    forum.user(invite_id=invite.id, created_at=now - timedelta(hours=3))
    job = forum.item(
        test_user, hours=24, max_bid=100, status_updated_at=now - timedelta(hours=1)
    )
    forum.item(
        test_user,
        hours=24,
        max_bid=100,
        status=ITEM_STATUS_STOPPED,
        status_updated_at=now - timedelta(hours=1),
    )

    page = list_notifications(db_session, test_user, now=now)

    assert [(note.type, note.id) for note in page.notifications] == [
        ("JobChanged", job.id),
        ("InvoicePaid", paid.id),
        ("Invitification", invite.id),
    ]
    assert page.notifications[1].earned_sats == 12_345


def test_first_page_advances_last_checked(db_session, forum, test_user, now) -> None:
    previous = now - timedelta(hours=48)
    test_user.checked_notes_at = previous
    forum.earn(test_user, 5_000, hours=24)
    forum.earn(test_user, 7_000, hours=72)

    page = list_notifications(db_session, test_user, now=now)

    assert page.last_checked == previous
    assert page.earn is not None
    assert page.earn.earned_sats == 5
    assert test_user.checked_notes_at == now


def test_later_pages_leave_last_checked_alone(db_session, forum, test_user, now) -> None:
    previous = now - timedelta(hours=48)
    test_user.checked_notes_at = previous
    forum.earn(test_user, 5_000, hours=24)

    token = encode_cursor(Cursor(time=now, offset=21))
    page = list_notifications(db_session, test_user, token, now=now + timedelta(hours=1))

    assert page.earn is None
    assert page.notifications == []
    assert test_user.checked_notes_at == previous


def test_earn_summary_respects_preference(db_session, forum, now) -> None:
    user = forum.user(note_earning=False)
    forum.earn(user, 50_000, hours=1)

    page = list_notifications(db_session, user, now=now)

    assert page.earn is None
    assert page.last_checked is None


def test_earn_summary_needs_a_whole_sat(db_session, forum, test_user, now) -> None:
    forum.earn(test_user, 999, hours=1)

    assert list_notifications(db_session, test_user, now=now).earn is None


def test_notifications_need_a_viewer(db_session) -> None:
    with pytest.raises(AuthenticationError):
        list_notifications(db_session, None)


def test_resolve_entity(db_session, forum, test_user, other_user, now) -> None:
    root = forum.item(test_user, hours=3)
    forum.item(other_user, parent=root, hours=2)
    forum.invoice(test_user, hours=2, confirmed_at=now - timedelta(hours=1), msats_received=1000)

    page = list_notifications(db_session, test_user, now=now)
    entities = [resolve_entity(db_session, note, test_user) for note in page.notifications]

    assert isinstance(entities[0], Invoice)
    assert isinstance(entities[1], Item)
    assert entities[1].parent_id == root.id
