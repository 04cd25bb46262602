"""Wallet history endpoints."""

from fastapi import APIRouter, Query

from forum_feed.core.errors import AuthenticationError
from forum_feed.schemas.wallet import WalletHistoryResponse
from forum_feed.services.wallet import list_wallet_history

from ..dependencies import SessionDep, ViewerDep, raise_http

router = APIRouter(prefix="/wallet", tags=["wallet"])


@router.get("/history", response_model=WalletHistoryResponse)
async def get_wallet_history(
    db: SessionDep,
    viewer: ViewerDep,
    cursor: str | None = Query(None),
    inc: str | None = Query(None, description="Comma separated: invoice,withdrawal,stacked,spent"),
) -> WalletHistoryResponse:
    """List the viewer's wallet history, newest first."""
    try:
        page = list_wallet_history(db, viewer, cursor, inc)
    except AuthenticationError as err:
        raise_http(err)
    return WalletHistoryResponse(cursor=page.cursor, facts=page.facts)
