"""Shared API dependencies for viewer resolution and error translation."""

from typing import Annotated, NoReturn

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from forum_feed.core.errors import AuthenticationError, ValidationError
from forum_feed.core.security import decode_subject
from forum_feed.db.session import get_db
from forum_feed.models import User

# Feeds are readable anonymously, so a missing token is not an error here.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_viewer(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User | None:
    """Return the user the bearer token identifies, or None for anonymous readers.

    Raises:
        HTTPException: If a token is present but invalid or names no user.
    """
    if credentials is None:
        return None
    user_id = decode_subject(credentials.credentials)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


ViewerDep = Annotated[User | None, Depends(get_viewer)]


def raise_http(err: ValidationError | AuthenticationError) -> NoReturn:
    """Translate a service error into the matching HTTP error."""
    if isinstance(err, AuthenticationError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(err),
        ) from err
    detail: dict[str, str | None] = {"message": err.message, "argument": err.argument_name}
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail) from err
