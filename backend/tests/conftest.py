"""
Pytest fixtures: a fresh SQLite database per test, principals, tokens and an
HTTP client wired to the test database.

Every request made through the client gets its own session, like production,
so concurrent requests really run in separate transactions.
"""

import os
import uuid
from typing import AsyncGenerator

# Configure before anything imports ticketing settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATABASE_URL_SYNC", "sqlite:///:memory:")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from ticketing.main import app
from ticketing.db.base import Base
from ticketing.db.session import build_engine, get_db
from ticketing.models.event import Event
from ticketing.services.access_policy import Principal

from helpers import headers_for, make_event


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Session factory bound to a throwaway database file with all tables created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ticketing_test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests each open a session on the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def user_a() -> Principal:
    return Principal(user_id=uuid.uuid4(), email="alice@example.com")


@pytest_asyncio.fixture
async def user_b() -> Principal:
    return Principal(user_id=uuid.uuid4(), email="bob@example.com")


@pytest_asyncio.fixture
async def admin() -> Principal:
    return Principal(user_id=uuid.uuid4(), is_admin=True, email="admin@example.com")


@pytest_asyncio.fixture
async def auth_headers(user_a: Principal) -> dict:
    return headers_for(user_a)


@pytest_asyncio.fixture
async def other_headers(user_b: Principal) -> dict:
    return headers_for(user_b)


@pytest_asyncio.fixture
async def admin_headers(admin: Principal) -> dict:
    return headers_for(admin)


@pytest_asyncio.fixture
async def test_event(session_factory) -> Event:
    """An upcoming event with 100 free seats."""
    return await make_event(session_factory, total_seats=100)


@pytest_asyncio.fixture
async def small_event(session_factory) -> Event:
    """Five seats, all free."""
    return await make_event(session_factory, total_seats=5, title="Small Room")


@pytest_asyncio.fixture
async def last_seat_event(session_factory) -> Event:
    """A single-seat event."""
    return await make_event(session_factory, total_seats=1, title="Intimate Gig")
