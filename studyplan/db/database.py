"""
Database Module

Async SQLAlchemy engine, session factory and declarative Base.

Usage:
------
    from studyplan.db.database import get_db

    @router.get("/items")
    async def list_items(db: AsyncSession = Depends(get_db)):
        ...
"""

import logging
from typing import AsyncGenerator, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from studyplan.core.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by all models."""
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, echo: bool = False, **engine_kwargs) -> AsyncEngine:
    """Create an async engine, switching on foreign keys for SQLite."""
    new_engine = create_async_engine(database_url, echo=echo, **engine_kwargs)
    if new_engine.url.get_backend_name() == "sqlite":
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.SQLALCHEMY_ECHO)
AsyncSessionLocal = build_sessionmaker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a database session for FastAPI dependency injection.

    The session is closed when the request scope finishes.
    """
    async with AsyncSessionLocal() as session:
        yield session


async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    """
    Create tables from model metadata.

    Intended for local development and tests; deployments run
    `alembic upgrade head` instead.
    """
    # Import models so they register on Base.metadata
    import studyplan.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_db_connection() -> bool:
    """Return True if a trivial query succeeds."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
