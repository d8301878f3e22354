"""Async database engine, session factory and storage error translation."""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from overseas_tracker.config.settings import DatabaseSettings
from overseas_tracker.core.exceptions import TransientStorageError

logger = logging.getLogger(__name__)

# SQLAlchemy declarative base for models
Base = declarative_base()


def _connect_args(db_settings: DatabaseSettings) -> dict:
    if db_settings.url.startswith("sqlite"):
        return {"timeout": db_settings.timeout_seconds}
    if "+asyncpg" in db_settings.url:
        return {
            "timeout": db_settings.timeout_seconds,
            "command_timeout": db_settings.timeout_seconds,
        }
    return {}


def create_engine(db_settings: DatabaseSettings) -> AsyncEngine:
    kwargs = {
        "echo": db_settings.echo,
        "pool_pre_ping": True,
        "connect_args": _connect_args(db_settings),
    }
    if not db_settings.url.startswith("sqlite"):
        kwargs["pool_size"] = db_settings.pool_size
        kwargs["pool_timeout"] = db_settings.timeout_seconds
    return create_async_engine(db_settings.url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine, autoflush=False, expire_on_commit=False
    )


class Database:
    """Owns the engine and session factory; created and disposed by the app lifespan."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = create_session_factory(engine)

    @classmethod
    def from_settings(cls, db_settings: DatabaseSettings) -> "Database":
        return cls(create_engine(db_settings))

    async def create_all(self) -> None:
        # Import models so their tables are registered on Base.metadata
        from overseas_tracker import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency for database sessions."""
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session


@asynccontextmanager
async def storage_errors(operation: str):
    """Translate connectivity failures and timeouts into TransientStorageError."""
    try:
        yield
    except (OperationalError, InterfaceError, asyncio.TimeoutError, ConnectionError) as e:
        logger.error(f"Storage failure during {operation}: {e}")
        raise TransientStorageError(
            operation, details={"operation": operation, "reason": type(e).__name__}
        ) from e
