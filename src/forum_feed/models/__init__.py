# src/forum_feed/models/__init__.py
"""SQLAlchemy models for the forum feed application."""

from .earn import Earn
from .invite import Invite
from .invoice import Invoice
from .item import Item
from .item_act import ItemAct
from .mention import Mention
from .pin import Pin
from .sub import Sub
from .user import User
from .withdrawal import Withdrawal

__all__ = [
    "Earn",
    "Invite",
    "Invoice",
    "Item",
    "ItemAct",
    "Mention",
    "Pin",
    "Sub",
    "User",
    "Withdrawal",
]
