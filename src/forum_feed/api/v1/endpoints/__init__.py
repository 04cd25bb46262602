"""API endpoint modules."""

from .comments import router as comments_router
from .items import router as items_router
from .notifications import router as notifications_router
from .wallet import router as wallet_router

__all__ = [
    "comments_router",
    "items_router",
    "notifications_router",
    "wallet_router",
]
