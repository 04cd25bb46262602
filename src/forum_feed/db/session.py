"""Engine, session factory and the request-scoped session dependency."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from forum_feed.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs,
# and the SQL function compilers are registered before the first query.
import forum_feed.models  # noqa: E402,F401
import forum_feed.db.functions  # noqa: E402,F401


def _engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.sql_debug}
    if make_url(url).get_backend_name() == "sqlite":
        # Sync dependencies run in FastAPI's threadpool, not the request's thread.
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_pre_ping"] = True
    return options


_database_url = settings.effective_database_url
engine = create_engine(_database_url, **_engine_options(_database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection.

    Anything left uncommitted when the request fails is rolled back.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

