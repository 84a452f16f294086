"""
Test fixtures for the CodeShare API test suite.

This module provides shared fixtures used across all test files:

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - clock / verification_store / mailer: Injected email-code machinery with
    a controllable clock and a mailer that records instead of sending
  - client: Async HTTP test client (unauthenticated)
  - authenticated_client: Test client with a pre-registered user and JWT
  - register: Sign up additional users through the real endpoint
  - user: A registered user (with wallet) created through the service layer

Key design decisions:
  - In-memory SQLite (sqlite+aiosqlite://) is used for speed and isolation.
    Each test gets a completely fresh database.
  - get_db is overridden so the application code runs exactly as in
    production, against the test database.
  - ASGITransport does not run the lifespan hook, so the fixtures put the
    verification store and mailer on app.state themselves.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from codeshare.database import Base, enable_sqlite_foreign_keys, get_db
from codeshare.main import app
from codeshare.services import auth_service
from codeshare.verification import VerificationCodeStore


# In-memory SQLite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite://"

TEST_PASSWORD = "SecurePass123"


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingMailer:
    """Mailer that keeps every sent code for assertions."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    async def send_verification_code(self, email: str, code: str, ttl_seconds: float) -> None:
        self.sent.append((email, code))

    def last_code_for(self, email: str) -> str:
        codes = [code for sent_to, code in self.sent if sent_to == email]
        assert codes, f"No code was sent to {email}"
        return codes[-1]


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Provide an async session bound to the test engine."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def verification_store(clock):
    return VerificationCodeStore(ttl_seconds=300, clock=clock)


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest_asyncio.fixture
async def client(db_engine, verification_store, mailer):
    """
    Async HTTP test client with the test database injected.

    This overrides the get_db dependency so all requests hit the
    in-memory test database instead of the real one.
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.state.verification_store = verification_store
    app.state.mailer = mailer

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


async def _signup(client, username: str, **extra) -> dict:
    response = await client.post(
        "/auth/signup",
        json={"username": username, "password": TEST_PASSWORD, **extra},
    )
    assert response.status_code == 201, f"Signup failed: {response.text}"
    return response.json()


@pytest_asyncio.fixture
async def register(client):
    """Register a user through the real endpoint; returns the signup body."""

    async def _register(username: str, **extra) -> dict:
        return await _signup(client, username, **extra)

    return _register


@pytest_asyncio.fixture
async def authenticated_client(client):
    """
    Test client with a pre-registered user and JWT token.

    Signs up via the real signup endpoint, then sets the Authorization
    header on the client for all subsequent requests.
    """
    body = await _signup(
        client,
        "testuser",
        email="testuser@example.com",
        phone="13800138000",
    )
    client.headers["Authorization"] = f"Bearer {body['token']}"
    return client


@pytest_asyncio.fixture
async def user(db_session):
    """A registered user with a zero-balance wallet, committed."""
    created, _ = await auth_service.signup(
        db_session,
        username="u1",
        password=TEST_PASSWORD,
        email="u1@example.com",
    )
    await db_session.commit()
    return created
