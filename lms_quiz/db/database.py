"""
Database Module

Async SQLAlchemy engine, session factory and the declarative ``Base``
shared by every model.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from lms_quiz.core.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def get_database_url() -> str:
    """Get properly formatted async database URL"""
    db_url = settings.DATABASE_URL
    if db_url.startswith("postgresql://"):
        db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return db_url


def _create_engine():
    db_url = get_database_url()

    if db_url.startswith("sqlite"):
        # SQLite requires NullPool for thread safety
        return create_async_engine(
            db_url,
            echo=settings.SQLALCHEMY_ECHO,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )

    kwargs = {}
    if settings.DB_POOL_MIN_SIZE is not None:
        kwargs["pool_size"] = settings.DB_POOL_MIN_SIZE
    if settings.DB_POOL_MAX_SIZE is not None:
        kwargs["max_overflow"] = max(
            settings.DB_POOL_MAX_SIZE - (settings.DB_POOL_MIN_SIZE or 5), 0
        )

    return create_async_engine(
        db_url,
        echo=settings.SQLALCHEMY_ECHO,
        pool_pre_ping=True,
        **kwargs,
    )


engine = _create_engine()

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields a database session.

    Anything left uncommitted when the request fails is rolled back.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create all tables from model metadata."""
    # Register every model on Base.metadata
    import lms_quiz.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_db_connection() -> bool:
    """Return True when a trivial query succeeds."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
