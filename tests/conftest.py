"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from userverify.database import get_session
from userverify.main import app
from userverify.models import Account, User
from userverify.services import (
    AccountStore,
    EmailService,
    SchemaInspector,
    TokenCipher,
    VerificationService,
)

TEST_SECRET = "test-secret-that-is-at-least-32-characters"


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
        # A table that predates the verification columns
        await conn.execute(
            text(
                "CREATE TABLE legacy_users ("
                "id INTEGER PRIMARY KEY, email VARCHAR(255) NOT NULL, verified BOOLEAN)"
            )
        )
        # A table that has a token column but no verified flag
        await conn.execute(
            text(
                "CREATE TABLE draft_users ("
                "id INTEGER PRIMARY KEY, email VARCHAR(255) NOT NULL, "
                "verification_token VARCHAR(255))"
            )
        )

    yield engine

    await engine.dispose()


@pytest.fixture
async def session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with async_session_factory() as session:
        yield session


@pytest.fixture
async def client(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def user(session: AsyncSession) -> User:
    """Create an unverified test user."""
    user = User(email="a@x.com", name="Test User")
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
def account(user: User) -> Account:
    """Verification record for the test user."""
    return user.to_account()


@pytest.fixture
async def legacy_account(session: AsyncSession) -> Account:
    """Account living in a table without a verification_token column."""
    await session.execute(
        text("INSERT INTO legacy_users (id, email, verified) VALUES (1, 'legacy@x.com', 0)")
    )
    await session.commit()
    return Account(id=1, email="legacy@x.com", table_name="legacy_users")


@pytest.fixture
async def draft_account(session: AsyncSession) -> Account:
    """Account living in a table without a verified column."""
    await session.execute(
        text("INSERT INTO draft_users (id, email, verification_token) VALUES (7, 'draft@x.com', NULL)")
    )
    await session.commit()
    return Account(id=7, email="draft@x.com", table_name="draft_users")


@pytest.fixture
def mail_backend() -> AsyncMock:
    """Mock email backend that reports success."""
    backend = AsyncMock()
    backend.send.return_value = True
    return backend


@pytest.fixture
def verification(session: AsyncSession, mail_backend: AsyncMock) -> VerificationService:
    """Verification service wired against the test database."""
    return VerificationService(
        store=AccountStore(session),
        schema=SchemaInspector(session),
        mailer=EmailService(backend=mail_backend),
        cipher=TokenCipher(TEST_SECRET),
    )
