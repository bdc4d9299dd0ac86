# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterable, Iterator, Mapping
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["REALTIME_ENABLED"] = "false"
for _var in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET"):
    os.environ.pop(_var, None)

from qa_forum.core.security import create_access_token  # noqa: E402
from qa_forum.db.session import Base, engine_options  # noqa: E402
from qa_forum.db.session import get_db as app_get_session  # noqa: E402
from qa_forum.main import app as fastapi_app  # noqa: E402
from qa_forum.models import Account  # noqa: E402
from qa_forum.services.content import ContentService  # noqa: E402
from qa_forum.services.notifications import NotificationFanout  # noqa: E402
from qa_forum.services.realtime import RealtimePublisher  # noqa: E402
from qa_forum.services.reputation import ReputationLedger  # noqa: E402
from qa_forum.services.votes import VoteLedger  # noqa: E402

TEST_DB_URL = "sqlite://"

_ACCOUNT_COUNTER = count(1)


class RecordingPublisher(RealtimePublisher):
    """Publisher that keeps events in memory instead of talking to Redis."""

    def __init__(self) -> None:
        super().__init__(enabled=True)
        self.events: list[tuple[int, dict[str, Any]]] = []

    def publish(self, account_id: int, event: Mapping[str, Any]) -> bool:
        self.events.append((account_id, dict(event)))
        return True


class FakeAssetStore:
    """In-memory stand-in for the Cloudinary store."""

    enabled = True

    def __init__(self) -> None:
        self.discarded: list[str] = []

    def discard(self, images: Iterable[Mapping[str, Any]]) -> list[str]:
        self.discarded.extend(image["public_id"] for image in images)
        return []


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(TEST_DB_URL, **engine_options(TEST_DB_URL))
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit, so every test cleans up the tables it touched.
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


@pytest.fixture()
def make_account(db_session: Session) -> Callable[..., Account]:
    """Return a factory that persists accounts."""

    def _make(**overrides: Any) -> Account:
        number = next(_ACCOUNT_COUNTER)
        values: dict[str, Any] = {
            "username": f"user{number}",
            "email": f"user{number}@example.com",
        }
        values.update(overrides)
        account = Account(**values)
        db_session.add(account)
        db_session.commit()
        db_session.refresh(account)
        return account

    return _make


@pytest.fixture()
def alice(make_account: Callable[..., Account]) -> Account:
    return make_account(display_name="Alice")


@pytest.fixture()
def bob(make_account: Callable[..., Account]) -> Account:
    return make_account(display_name="Bob")


@pytest.fixture()
def carol(make_account: Callable[..., Account]) -> Account:
    return make_account(display_name="Carol")


@pytest.fixture()
def auth_headers() -> Callable[[Account], dict[str, str]]:
    """Return a helper building bearer headers for an account."""

    def _headers(account: Account) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(account.id)}"}

    return _headers


@pytest.fixture()
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture()
def fanout(publisher: RecordingPublisher) -> NotificationFanout:
    return NotificationFanout(publisher=publisher)


@pytest.fixture()
def asset_store() -> FakeAssetStore:
    return FakeAssetStore()


@pytest.fixture()
def content_service(fanout: NotificationFanout, asset_store: FakeAssetStore) -> ContentService:
    return ContentService(
        ledger=ReputationLedger(),
        fanout=fanout,
        votes=VoteLedger(),
        assets=asset_store,  # type: ignore[arg-type]
    )
