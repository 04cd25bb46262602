"""Item feed endpoints for the forum API."""

from fastapi import APIRouter, HTTPException, Query, status

from forum_feed.core.errors import ValidationError
from forum_feed.models import Item
from forum_feed.schemas.item import (
    AuctionPositionResponse,
    CommentResponse,
    ItemDetailResponse,
    ItemResponse,
    ItemsPageResponse,
)
from forum_feed.services import items as item_service
from forum_feed.services.comments import comment_tree
from forum_feed.services.feed import RankingContext, list_all_items, list_items
from forum_feed.services.tree import CommentNode

from ..dependencies import SessionDep, ViewerDep, raise_http

router = APIRouter(prefix="/items", tags=["items"])


def _get_item_or_404(db: SessionDep, item_id: int) -> Item:
    item = item_service.get_item(db, item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return item


def _comment_out(node: CommentNode) -> CommentResponse:
    base = ItemResponse.model_validate(node.item).model_dump()
    return CommentResponse(**base, comments=[_comment_out(child) for child in node.comments])


@router.get("/", response_model=ItemsPageResponse)
async def get_items(
    db: SessionDep,
    viewer: ViewerDep,
    sort: str | None = Query(None, description="hot (default), recent, top or user"),
    sub: str | None = Query(None, description="Scope name"),
    within: str | None = Query(None, description="Top window: day, week, month, year"),
    name: str | None = Query(None, description="User name for sort=user"),
    cursor: str | None = Query(None, description="Cursor from the previous page"),
) -> ItemsPageResponse:
    """List root items in the requested ranking.

    Raises:
        HTTPException: 400 naming the argument when the sort or name is invalid
    """
    context = RankingContext(sort=sort, scope=sub, within=within, name=name)
    try:
        page = list_items(db, context, viewer.id if viewer else None, cursor)
    except ValidationError as err:
        raise_http(err)
    return ItemsPageResponse(
        cursor=page.cursor,
        items=[ItemResponse.model_validate(item) for item in page.items],
        pins=None
        if page.pins is None
        else [ItemResponse.model_validate(item) for item in page.pins],
    )


@router.get("/all", response_model=ItemsPageResponse)
async def get_all_items(
    db: SessionDep,
    cursor: str | None = Query(None),
) -> ItemsPageResponse:
    """List every item, comments included, newest first."""
    page = list_all_items(db, cursor)
    return ItemsPageResponse(
        cursor=page.cursor,
        items=[ItemResponse.model_validate(item) for item in page.items],
    )


@router.get("/auction-position", response_model=AuctionPositionResponse)
async def get_auction_position(
    db: SessionDep,
    sub: str = Query(..., description="Auction scope name"),
    bid: int = Query(..., ge=0),
    item_id: int | None = Query(None, alias="id", description="Item to leave out of the count"),
) -> AuctionPositionResponse:
    """Return the rank a bid would take in an auction scope."""
    position = item_service.auction_position(db, sub, bid, exclude_id=item_id)
    return AuctionPositionResponse(position=position)


@router.get("/{item_id}", response_model=ItemDetailResponse)
async def get_item(
    item_id: int,
    db: SessionDep,
    viewer: ViewerDep,
) -> ItemDetailResponse:
    """Get an item with its engagement aggregates."""
    item = _get_item_or_404(db, item_id)
    stats = item_service.item_stats(db, item, viewer.id if viewer else None)
    root = item_service.get_root(db, item)
    return ItemDetailResponse(
        **ItemResponse.model_validate(item).model_dump(),
        sats=stats.sats,
        upvotes=stats.upvotes,
        boost=stats.boost,
        me_sats=stats.me_sats,
        ncomments=stats.ncomments,
        root_id=root.id if root else None,
        position=item_service.pin_position(db, item),
        prior=item_service.prior_pinned(db, item),
    )


@router.get("/{item_id}/comments", response_model=list[CommentResponse])
async def get_item_comments(
    item_id: int,
    db: SessionDep,
    viewer: ViewerDep,
    sort: str | None = Query(None, description="hot (default), top or recent"),
) -> list[CommentResponse]:
    """Get the nested comment thread below an item."""
    item = _get_item_or_404(db, item_id)
    try:
        tree = comment_tree(db, item, sort, viewer_id=viewer.id if viewer else None)
    except ValidationError as err:
        raise_http(err)
    return [_comment_out(node) for node in tree]
