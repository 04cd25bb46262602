"""Wallet history schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, computed_field

from .common import Page


class Fact(BaseModel):
    """One entry of a user's wallet history; amounts are in millisats."""

    type: str
    fact_id: int
    created_at: datetime
    msats: int
    msats_fee: int | None = None
    status: str | None = None
    bolt11: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def id(self) -> str:
        return f"{self.type}{self.fact_id}"


class WalletHistoryResponse(Page):
    """One page of wallet history."""

    facts: list[Fact]
