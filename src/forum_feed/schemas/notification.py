"""Notification event schemas.

Notifications form a closed union discriminated by ``type``. Every variant
shares the ``id``/``sort_time`` envelope; what ``id`` refers to depends on
the variant (an item, an invoice or an invite).
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from .common import Page


class _Envelope(BaseModel):
    id: int
    sort_time: datetime


class Reply(_Envelope):
    type: Literal["Reply"] = "Reply"


class Votification(_Envelope):
    type: Literal["Votification"] = "Votification"
    earned_sats: int


class Mention(_Envelope):
    type: Literal["Mention"] = "Mention"
    mention: bool = True


class Invitification(_Envelope):
    type: Literal["Invitification"] = "Invitification"


class JobChanged(_Envelope):
    type: Literal["JobChanged"] = "JobChanged"


class InvoicePaid(_Envelope):
    type: Literal["InvoicePaid"] = "InvoicePaid"
    earned_sats: int


class Earn(_Envelope):
    type: Literal["Earn"] = "Earn"
    earned_sats: int


Notification = Annotated[
    Union[Reply, Votification, Mention, Invitification, JobChanged, InvoicePaid, Earn],
    Field(discriminator="type"),
]

notification_adapter: TypeAdapter[Notification] = TypeAdapter(Notification)


class NotificationsResponse(Page):
    """One page of the notification feed."""

    last_checked: datetime | None = None
    earn: Earn | None = None
    notifications: list[Notification]
