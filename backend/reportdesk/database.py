"""
ReportDesk Backend — Database Session Management
==================================================

What:  Async SQLAlchemy engine, session factory, FastAPI session dependency
       and the transaction helper used by multi-statement writes.
How:   One engine per process; one AsyncSession per request, injected into
       route handlers (and from there into services) with Depends().

Connection Pooling:
    Server databases (PostgreSQL/asyncpg) get an explicit pool
    (pool_size / max_overflow / pre_ping / recycle). SQLite URLs keep
    SQLAlchemy's default pool and turn on foreign key enforcement per
    connection, which SQLite leaves off by default.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from reportdesk.config import settings


def build_engine(database_url: str) -> AsyncEngine:
    """Create an async engine for `database_url` with backend-appropriate options."""
    if database_url.startswith("sqlite"):
        new_engine = create_async_engine(
            database_url,
            echo=settings.log_level == "DEBUG",
        )

        @event.listens_for(new_engine.sync_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return new_engine

    return create_async_engine(
        database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=settings.log_level == "DEBUG",
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: response models read attributes after commit
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# ── Engine & Session Factory ──────────────────────────────────────────────
engine = build_engine(settings.database_url)
async_session_factory = build_session_factory(engine)


class Base(DeclarativeBase):
    """Base class for all ORM models; its metadata drives Alembic and create_all."""
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler (handlers pass it to services)
        3. On success: commits whatever the services flushed
        4. On error: rolls back so no partial write survives the request
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/reports")
        async def list_reports(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def transactional(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    Commit everything written inside the block, or roll all of it back.

    Used where several statements must become visible together (the content
    version bump and its history snapshot). Any exception raised inside the
    block triggers a rollback and is re-raised unchanged.

    Example:
        async with transactional(db):
            db.add(history_row)
            await db.flush()
            await db.execute(update(...))
    """
    try:
        yield session
        await session.commit()
    except BaseException:
        await session.rollback()
        raise


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_all_tables(bind: AsyncEngine = engine) -> None:
    """Create every table registered on Base (scripts/init_db.py and tests)."""
    import reportdesk.models  # noqa: F401 - registers models with Base.metadata

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Close all pooled connections; called during application shutdown."""
    await engine.dispose()
