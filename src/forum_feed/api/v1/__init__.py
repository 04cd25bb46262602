# src/forum_feed/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    comments_router,
    items_router,
    notifications_router,
    wallet_router,
)

__all__ = [
    "comments_router",
    "items_router",
    "notifications_router",
    "wallet_router",
]
