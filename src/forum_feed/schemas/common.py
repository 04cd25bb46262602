"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field


class Page(BaseModel):
    """Base for paged responses; a null cursor means there is nothing more."""

    cursor: str | None = Field(None, description="Opaque cursor token for the next page.")
