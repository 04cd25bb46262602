"""Flat comment listing endpoints."""

from fastapi import APIRouter, Query

from forum_feed.core.errors import ValidationError
from forum_feed.schemas.item import CommentsPageResponse, ItemResponse
from forum_feed.services.comments import list_flat_comments

from ..dependencies import SessionDep, raise_http

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/", response_model=CommentsPageResponse)
async def get_comments(
    db: SessionDep,
    sort: str | None = Query(None, description="user or top"),
    name: str | None = Query(None),
    within: str | None = Query(None),
    cursor: str | None = Query(None),
) -> CommentsPageResponse:
    """List comments across threads."""
    try:
        page = list_flat_comments(db, sort=sort, cursor=cursor, name=name, within=within)
    except ValidationError as err:
        raise_http(err)
    return CommentsPageResponse(
        cursor=page.cursor,
        comments=[ItemResponse.model_validate(item) for item in page.comments],
    )
