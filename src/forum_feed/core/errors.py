"""Domain exceptions raised by the feed services.

Endpoints translate these into HTTP responses; nothing in the services
layer knows about status codes.
"""
from __future__ import annotations


class FeedError(Exception):
    """Base class for errors surfaced to feed callers."""


class ValidationError(FeedError):
    """A required argument is missing or has an unrecognized value."""

    def __init__(self, message: str, argument_name: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.argument_name = argument_name


class AuthenticationError(FeedError):
    """The operation needs a viewer and none (or the wrong one) was supplied."""
