from __future__ import annotations

import os
import time
import uuid
from collections.abc import Generator, Iterator
from typing import Any

import pytest

os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-key-for-agora")
os.environ.setdefault("PYTEST_RUNNING", "true")

from fastapi import FastAPI
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from agora.api.v1.dependencies import get_summarizer_dep
from agora.core.settings import settings
from agora.db.session import Base
from agora.db.session import get_db as app_get_session
from agora.main import app as fastapi_app
from agora.models import Community, Post, User
from agora.services.summarizer import SummarizerError, SummaryRequest

TEST_DB_URL = "sqlite://"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite needs these hooks for SAVEPOINT to behave; foreign keys match production.
    @event.listens_for(engine, "connect")
    def _configure_pysqlite(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _emit_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    """Session whose commits become savepoints inside a rolled-back transaction."""
    connection = engine.connect()
    transaction = connection.begin()
    session = Session(
        bind=connection,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    try:
        yield session
    finally:
        session.close()
        if transaction.is_active:
            transaction.rollback()
        connection.close()


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


def make_token(subject: str | None, **claims: Any) -> str:
    """Build a bearer token the way the identity provider signs them."""
    now = int(time.time())
    payload: dict[str, Any] = {
        "aud": settings.auth_jwt_audience,
        "iat": now,
        "exp": now + 3600,
        "role": "authenticated",
    }
    if subject is not None:
        payload["sub"] = subject
    payload.update(claims)
    return jwt.encode(payload, settings.auth_jwt_secret, algorithm=settings.auth_jwt_algorithm)


def _make_user(db: Session, username: str) -> User:
    user = User(id=str(uuid.uuid4()), username=username)
    db.add(user)
    db.flush()
    db.refresh(user)
    return user


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return a persisted test user."""
    return _make_user(db_session, "alice")


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """Create and return a second persisted user."""
    return _make_user(db_session, "bob")


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return {"Authorization": f"Bearer {make_token(test_user.id)}"}


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return {"Authorization": f"Bearer {make_token(other_user.id)}"}


@pytest.fixture()
def community(db_session: Session) -> Community:
    """Create a default test community."""
    community = Community(
        slug="test",
        name="Test Community",
        description="Test community description",
        member_count=0,
    )
    db_session.add(community)
    db_session.flush()
    db_session.refresh(community)
    return community


@pytest.fixture()
def test_post(db_session: Session, test_user: User, community: Community) -> Post:
    """Create a baseline post directly, bypassing membership bookkeeping."""
    post = Post(
        community_id=community.id,
        author_id=test_user.id,
        title="Test post",
        body="Test post content",
    )
    db_session.add(post)
    db_session.flush()
    db_session.refresh(post)
    return post


class FakeSummarizer:
    """Stand-in for the summarization client that records its requests."""

    def __init__(self, summary: str = "A generated summary", error: Exception | None = None):
        self.summary = summary
        self.error = error
        self.requests: list[SummaryRequest] = []

    async def summarize(self, request: SummaryRequest) -> str:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.summary


@pytest.fixture()
def fake_summarizer(app: FastAPI) -> Iterator[FakeSummarizer]:
    """Route summary requests to a FakeSummarizer."""
    summarizer = FakeSummarizer()
    app.dependency_overrides[get_summarizer_dep] = lambda: summarizer
    try:
        yield summarizer
    finally:
        app.dependency_overrides.pop(get_summarizer_dep, None)


@pytest.fixture()
def failing_summarizer(app: FastAPI) -> Iterator[FakeSummarizer]:
    """Route summary requests to a summarizer that always fails."""
    summarizer = FakeSummarizer(error=SummarizerError("service unavailable"))
    app.dependency_overrides[get_summarizer_dep] = lambda: summarizer
    try:
        yield summarizer
    finally:
        app.dependency_overrides.pop(get_summarizer_dep, None)
