"""
Async engine, session factory and the request-scoped session dependency.

The reservation engine commits or rolls back explicitly at the end of every
mutation, so `get_db` only has to make sure nothing is left open when a
request fails halfway.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ticketing.core.config import get_settings
from ticketing.core.exceptions import StoreUnavailable
from ticketing.core.logging import get_logger
from ticketing.core.metrics import record_store_error

logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """Create an engine with pool settings appropriate for the backend."""
    settings = get_settings()

    if url.startswith("sqlite"):
        # SQLite serialises writers; wait for the lock instead of failing fast
        kwargs.setdefault("connect_args", {"timeout": 30})
        engine = create_async_engine(url, **kwargs)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    kwargs.setdefault("pool_size", settings.DB_POOL_SIZE)
    kwargs.setdefault("max_overflow", settings.DB_MAX_OVERFLOW)
    kwargs.setdefault("pool_timeout", settings.DB_POOL_TIMEOUT)
    kwargs.setdefault("pool_recycle", settings.DB_POOL_RECYCLE)
    kwargs.setdefault("pool_pre_ping", True)
    return create_async_engine(url, **kwargs)


engine = build_engine(get_settings().DATABASE_URL, echo=get_settings().DEBUG)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def guarded(db: AsyncSession, operation: str):
    """
    Wrap one unit of work: roll back on any failure, and surface driver-level
    outages (lost connection, lock timeout, deadlock) as StoreUnavailable.
    """
    try:
        yield db
    except (OperationalError, InterfaceError) as exc:
        await db.rollback()
        record_store_error(operation)
        logger.error("store_unavailable", operation=operation, error=str(exc))
        raise StoreUnavailable() from exc
    except Exception:
        await db.rollback()
        raise
