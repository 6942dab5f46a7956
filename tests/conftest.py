# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")

from drystore_hub.core.security import create_access_token
from drystore_hub.db.session import Base
from drystore_hub.db.session import get_db as app_get_session
from drystore_hub.db.session import get_session_factory as app_get_session_factory
from drystore_hub.main import app as fastapi_app
from drystore_hub.models import Channel, User
from drystore_hub.services import change_feed as change_feed_module
from drystore_hub.services import channels as channel_service
from drystore_hub.services import email as email_service
from drystore_hub.services import storage as storage_module
from drystore_hub.services import user_service
from drystore_hub.services.email import EmailSendError, EmailSendResult

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "secret123"

_USER_COUNTER = count(1)


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
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
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

    def _get_session_factory_override() -> sessionmaker[Session]:
        return sessionmaker(
            bind=db_session.connection(),
            autoflush=False,
            expire_on_commit=False,
            join_transaction_mode="create_savepoint",
        )

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[app_get_session_factory] = _get_session_factory_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(app_get_session_factory, None)


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> storage_module.ObjectStorage:
    """Point the object store at a per-test directory."""
    storage = storage_module.ObjectStorage(tmp_path / "storage")
    monkeypatch.setattr(storage_module, "_storage", storage)
    return storage


@pytest.fixture(autouse=True)
def isolated_change_feed(monkeypatch: pytest.MonkeyPatch) -> change_feed_module.ChangeFeed:
    """Give every test its own in-process feed without a Redis mirror."""
    feed = change_feed_module.ChangeFeed(redis_client=None)
    monkeypatch.setattr(change_feed_module, "_feed", feed)
    return feed


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Factory creating persisted users with a unique email."""

    def _make_user(display_name: str | None = None, *, is_admin: bool = False, email: str | None = None) -> User:
        index = next(_USER_COUNTER)
        return user_service.create_user(
            db_session,
            email=email or f"user{index}@drystore.com.br",
            password=TEST_PASSWORD,
            display_name=display_name or f"User {index}",
            is_admin=is_admin,
        )

    return _make_user


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return the primary (non-admin) test user."""
    return make_user("Test User")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second regular user."""
    return make_user("Other User")


@pytest.fixture()
def admin_user(make_user: Callable[..., User]) -> User:
    """Create and return an administrator."""
    return make_user("Admin User", is_admin=True)


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return auth_headers(other_user)


@pytest.fixture()
def admin_auth_token(admin_user: User) -> dict[str, str]:
    """Return authorization headers for the administrator."""
    return auth_headers(admin_user)


@pytest.fixture()
def channel(db_session: Session, admin_user: User, test_user: User) -> Channel:
    """Public channel created by the admin with the test user as a member."""
    created = channel_service.create_channel(db_session, admin_user, "geral", "Canal geral")
    channel_service.add_member(db_session, created, test_user.id)
    return created


@pytest.fixture()
def sent_emails(monkeypatch: pytest.MonkeyPatch) -> list[dict]:
    """Capture outgoing email instead of calling the provider."""
    outbox: list[dict] = []

    def _fake_send(**kwargs) -> EmailSendResult:
        outbox.append(kwargs)
        return EmailSendResult(provider="test", message_id=str(len(outbox)))

    monkeypatch.setattr(email_service, "send_email", _fake_send)
    return outbox


@pytest.fixture()
def failing_email(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make every delivery attempt fail."""

    def _fail(**kwargs) -> EmailSendResult:
        raise EmailSendError("provider down")

    monkeypatch.setattr(email_service, "send_email", _fail)
