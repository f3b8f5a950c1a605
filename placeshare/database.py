"""
PlaceShare Backend: Database Resource
=====================================

What:  The process-wide storage resource (async SQLAlchemy engine + session
       factory), the ORM Base, and the FastAPI session dependency.
How:   `Database` is constructed once by `create_app()` from Settings,
       stored on `app.state.database` and disposed in the lifespan shutdown.
       Repositories never reach for a global engine; they receive a session
       opened from this object.

Units of work:
    database.session()      plain session; reads, single-row updates
    database.transaction()  session inside BEGIN ... COMMIT; rolls back on
                            any exception raised inside the block

Connection pooling (non-SQLite URLs only):
    pool_size / max_overflow from settings, pre-ping on, recycle hourly.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from placeshare.config import Settings


class Base(DeclarativeBase):
    """Base class for all ORM models; its metadata is what Alembic tracks."""

    pass


class Database:
    """
    Owns the engine and hands out sessions.

    Attributes:
        engine:           AsyncEngine with its connection pool
        session_factory:  async_sessionmaker bound to the engine
    """

    def __init__(self, settings: Settings):
        engine_kwargs = {"echo": settings.log_level == "DEBUG"}
        if not settings.uses_sqlite:
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )
        self.engine: AsyncEngine = create_async_engine(settings.database_url, **engine_kwargs)
        # expire_on_commit=False: returned ORM objects stay readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Open an atomic unit: commit when the block exits normally, roll back
        when it raises. Everything written through the yielded session is
        either fully visible afterwards or not at all.
        """
        async with self.session_factory() as session:
            async with session.begin():
                yield session

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        """Create tables straight from the ORM metadata (tests, local dev)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close every pooled connection; called once at shutdown."""
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency providing a per-request session for read paths.

    Writes that must be atomic across tables do not use this session; they
    open their own unit through `Database.transaction()`.
    """
    database = get_database(request)
    async with database.session() as session:
        yield session
