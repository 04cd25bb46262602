# tests/conftest.py
from __future__ import annotations

from collections.abc import Generator, Iterator
from datetime import datetime, timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from forum_feed.core.security import create_access_token
from forum_feed.db.session import Base
from forum_feed.db.session import get_db as app_get_session
from forum_feed.db.time import utcnow
from forum_feed.main import app as fastapi_app
from forum_feed.models import (
    Earn,
    Invite,
    Invoice,
    Item,
    ItemAct,
    Mention,
    Pin,
    Sub,
    User,
    Withdrawal,
)
from forum_feed.models.item import ITEM_STATUS_ACTIVE, PATH_SEPARATOR
from forum_feed.models.item_act import ACT_VOTE

TEST_DB_URL = "sqlite://"

# Fixed session time for service tests; API tests run at the real clock,
# which is always later.
NOW = utcnow().replace(microsecond=0) - timedelta(minutes=5)

_NAME_COUNTER = count(1)
_HASH_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit (the notification check does), so wipe every table.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def hours_ago(hours: float) -> datetime:
    return NOW - timedelta(hours=hours)


class Forum:
    """Builds persisted forum rows with sensible defaults."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def user(self, name: str | None = None, *, trust: float = 1.0, **fields) -> User:
        user = User(
            name=name or f"user{next(_NAME_COUNTER)}",
            trust=trust,
            created_at=fields.pop("created_at", hours_ago(24 * 30)),
            **fields,
        )
        self.session.add(user)
        self.session.flush()
        return user

    def item(
        self,
        user: User,
        *,
        parent: Item | None = None,
        hours: float = 1.0,
        status: str = ITEM_STATUS_ACTIVE,
        **fields,
    ) -> Item:
        created_at = fields.pop("created_at", hours_ago(hours))
        item = Item(
            user_id=user.id,
            parent_id=parent.id if parent else None,
            created_at=created_at,
            updated_at=created_at,
            status=status,
            title=fields.pop("title", None if parent else "a post"),
            text=fields.pop("text", "hello"),
            path="0",
            **fields,
        )
        self.session.add(item)
        self.session.flush()
        item.path = f"{parent.path}{PATH_SEPARATOR}{item.id}" if parent else str(item.id)
        self.session.flush()
        return item

    def act(
        self,
        user: User,
        item: Item,
        *,
        sats: int = 1,
        act: str = ACT_VOTE,
        hours: float = 0.5,
    ) -> ItemAct:
        row = ItemAct(
            user_id=user.id,
            item_id=item.id,
            sats=sats,
            act=act,
            created_at=hours_ago(hours),
        )
        self.session.add(row)
        self.session.flush()
        return row

    def sub(self, name: str, **fields) -> Sub:
        sub = Sub(name=name, **fields)
        self.session.add(sub)
        self.session.flush()
        return sub

    def pin(self, position: int) -> Pin:
        pin = Pin(position=position)
        self.session.add(pin)
        self.session.flush()
        return pin

    def mention(self, item: Item, user: User, *, hours: float = 1.0) -> Mention:
        mention = Mention(item_id=item.id, user_id=user.id, created_at=hours_ago(hours))
        self.session.add(mention)
        self.session.flush()
        return mention

    def invite(self, user: User) -> Invite:
        invite = Invite(user_id=user.id, created_at=hours_ago(24 * 7))
        self.session.add(invite)
        self.session.flush()
        return invite

    def invoice(self, user: User, *, hours: float = 1.0, **fields) -> Invoice:
        created_at = hours_ago(hours)
        invoice = Invoice(
            user_id=user.id,
            hash=f"hash{next(_HASH_COUNTER)}",
            bolt11="lnbc1",
            created_at=created_at,
            expires_at=fields.pop("expires_at", created_at + timedelta(hours=1)),
            msats_requested=fields.pop("msats_requested", 10_000),
            **fields,
        )
        self.session.add(invoice)
        self.session.flush()
        return invoice

    def withdrawal(self, user: User, *, hours: float = 1.0, **fields) -> Withdrawal:
        withdrawal = Withdrawal(
            user_id=user.id,
            hash=f"hash{next(_HASH_COUNTER)}",
            bolt11="lnbc1",
            created_at=hours_ago(hours),
            **fields,
        )
        self.session.add(withdrawal)
        self.session.flush()
        return withdrawal

    def earn(self, user: User, msats: int, *, hours: float = 1.0) -> Earn:
        earn = Earn(user_id=user.id, msats=msats, created_at=hours_ago(hours))
        self.session.add(earn)
        self.session.flush()
        return earn


@pytest.fixture()
def now() -> datetime:
    """The session time service tests page at."""
    return NOW


@pytest.fixture()
def forum(db_session: Session) -> Forum:
    return Forum(db_session)


@pytest.fixture()
def test_user(forum: Forum) -> User:
    """Create and return a persisted test user."""
    return forum.user("alice")


@pytest.fixture()
def other_user(forum: Forum) -> User:
    """Create and return a second persisted user."""
    return forum.user("bob")


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    token = create_access_token(test_user.id)
    return {"Authorization": f"Bearer {token}"}
