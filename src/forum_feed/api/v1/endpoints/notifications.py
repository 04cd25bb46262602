"""Notification feed endpoints."""

from fastapi import APIRouter, Query

from forum_feed.core.errors import AuthenticationError
from forum_feed.schemas.notification import NotificationsResponse
from forum_feed.services.notifications import list_notifications

from ..dependencies import SessionDep, ViewerDep, raise_http

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=NotificationsResponse)
async def get_notifications(
    db: SessionDep,
    viewer: ViewerDep,
    cursor: str | None = Query(None),
    inc: str | None = Query(None, description="'replies' to list replies only"),
) -> NotificationsResponse:
    """List the viewer's notifications, newest first."""
    try:
        page = list_notifications(db, viewer, cursor, inc)
    except AuthenticationError as err:
        raise_http(err)
    return NotificationsResponse(
        cursor=page.cursor,
        last_checked=page.last_checked,
        earn=page.earn,
        notifications=page.notifications,
    )
