"""Item-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .common import Page


class ItemResponse(BaseModel):
    """Schema for item information returned by the API."""

    id: int
    created_at: datetime
    updated_at: datetime
    title: str | None = None
    text: str | None = None
    url: str | None = None
    user_id: int
    fwd_user_id: int | None = None
    parent_id: int | None = None
    pin_id: int | None = None
    sub_name: str | None = None
    max_bid: int | None = None
    company: str | None = None
    location: str | None = None
    remote: bool | None = None
    status: str
    path: str

    model_config = ConfigDict(from_attributes=True)


class ItemDetailResponse(ItemResponse):
    """An item with its derived aggregates."""

    sats: int = 0
    upvotes: int = 0
    boost: int = 0
    me_sats: int = 0
    ncomments: int = 0
    root_id: int | None = None
    position: int | None = None
    prior: int | None = None


class CommentResponse(ItemResponse):
    """A comment with its nested replies."""

    comments: list[CommentResponse] = Field(default_factory=list)


class ItemsPageResponse(Page):
    """One page of a ranked feed."""

    items: list[ItemResponse]
    pins: list[ItemResponse] | None = None


class CommentsPageResponse(Page):
    """One page of a flat comment listing."""

    comments: list[ItemResponse]


class AuctionPositionResponse(BaseModel):
    position: int


CommentResponse.model_rebuild()
