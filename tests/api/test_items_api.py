# tests/api/test_items_api.py
"""Tests for the item feed endpoints."""

from fastapi import status

from forum_feed.models.sub import RANKING_TYPE_AUCTION
from forum_feed.services.cursor import PAGE_SIZE


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


def test_list_items_default_feed(client, forum, test_user, other_user) -> None:
    pin = forum.pin(1)
    pinned = forum.item(test_user, pin_id=pin.id, hours=3)
    post = forum.item(test_user, hours=1)
    forum.act(other_user, post)

    response = client.get("/api/v1/items/")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [item["id"] for item in data["items"]] == [post.id]
    assert [item["id"] for item in data["pins"]] == [pinned.id]
    assert data["cursor"] is None


def test_list_items_pages(client, forum, test_user) -> None:
    for hour in range(PAGE_SIZE + 2):
        forum.item(test_user, hours=hour + 1)

    first = client.get("/api/v1/items/", params={"sort": "recent"}).json()
    second = client.get(
        "/api/v1/items/", params={"sort": "recent", "cursor": first["cursor"]}
    ).json()

    assert len(first["items"]) == PAGE_SIZE
    assert len(second["items"]) == 2
    assert second["cursor"] is None


def test_list_items_invalid_sort(client) -> None:
    response = client.get("/api/v1/items/", params={"sort": "sideways"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == {"message": "invalid sort type", "argument": "sort"}


def test_user_sort_needs_name(client) -> None:
    response = client.get("/api/v1/items/", params={"sort": "user"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"]["argument"] == "name"


def test_unknown_scope_is_empty(client, forum, test_user) -> None:
    forum.item(test_user)

    response = client.get("/api/v1/items/", params={"sub": "nowhere"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["items"] == []


def test_viewer_sees_own_pending_items(client, forum, test_user, auth_token) -> None:
    pending = forum.item(test_user, status="PENDING")

    anonymous = client.get("/api/v1/items/", params={"sort": "recent"}).json()
    author = client.get("/api/v1/items/", params={"sort": "recent"}, headers=auth_token).json()

    assert anonymous["items"] == []
    assert [item["id"] for item in author["items"]] == [pending.id]


def test_invalid_token_is_rejected(client) -> None:
    response = client.get("/api/v1/items/", headers={"Authorization": "Bearer nope"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_all_items(client, forum, test_user) -> None:
    root = forum.item(test_user, hours=2)
    comment = forum.item(test_user, parent=root, hours=1)

    data = client.get("/api/v1/items/all").json()

    assert [item["id"] for item in data["items"]] == [comment.id, root.id]


def test_get_item_with_stats(client, forum, test_user, other_user, auth_token) -> None:
    root = forum.item(test_user, hours=5)
    comment = forum.item(other_user, parent=root, hours=4)
    forum.item(test_user, parent=comment, hours=3)
    forum.act(other_user, root, sats=10)
    forum.act(other_user, root, sats=100, act="BOOST")
    forum.act(test_user, comment, sats=3, act="TIP")

    data = client.get(f"/api/v1/items/{root.id}").json()
    comment_data = client.get(f"/api/v1/items/{comment.id}", headers=auth_token).json()

    assert data["sats"] == 10
    assert data["upvotes"] == 10
    assert data["boost"] == 100
    assert data["ncomments"] == 2
    assert data["root_id"] is None
    assert comment_data["root_id"] == root.id
    assert comment_data["me_sats"] == 3
    assert comment_data["ncomments"] == 1


def test_get_pinned_item_reports_prior(client, forum, test_user) -> None:
    pin = forum.pin(3)
    earlier = forum.item(test_user, pin_id=pin.id, hours=24 * 7)
    current = forum.item(test_user, pin_id=pin.id, hours=1)

    data = client.get(f"/api/v1/items/{current.id}").json()

    assert data["position"] == 3
    assert data["prior"] == earlier.id


def test_get_missing_item(client) -> None:
    response = client.get("/api/v1/items/999")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_item_comments_are_nested(client, forum, test_user, other_user) -> None:
    root = forum.item(test_user, hours=10)
    c1 = forum.item(other_user, parent=root, hours=9)
    c3 = forum.item(other_user, parent=root, hours=5)
    c2 = forum.item(test_user, parent=c1, hours=1)

    response = client.get(f"/api/v1/items/{root.id}/comments", params={"sort": "recent"})

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [comment["id"] for comment in data] == [c3.id, c1.id]
    assert [comment["id"] for comment in data[1]["comments"]] == [c2.id]
    assert data[0]["comments"] == []


def test_item_comments_invalid_sort(client, forum, test_user) -> None:
    root = forum.item(test_user)

    response = client.get(f"/api/v1/items/{root.id}/comments", params={"sort": "best"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"]["argument"] == "sort"


def test_auction_position(client, forum, test_user) -> None:
    forum.sub("jobs", ranking_type=RANKING_TYPE_AUCTION)
    forum.item(test_user, sub_name="jobs", max_bid=500)
    mine = forum.item(test_user, sub_name="jobs", max_bid=300)

    response = client.get(
        "/api/v1/items/auction-position", params={"sub": "jobs", "bid": 400}
    )
    editing = client.get(
        "/api/v1/items/auction-position",
        params={"sub": "jobs", "bid": 100, "id": mine.id},
    )

    assert response.json() == {"position": 2}
    assert editing.json() == {"position": 2}
