"""
Database connection management with SQLAlchemy async.
Provides session dependency injection and connection pooling.
"""
import re
from collections.abc import AsyncGenerator
from typing import Annotated, Any

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from orderdesk.core.config import settings
from orderdesk.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""
    pass


def resolve_database_url(url: str) -> str:
    """Point bare PostgreSQL URLs at the asyncpg driver."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


def create_engine() -> AsyncEngine:
    """Create async database engine with proper configuration."""
    database_url = resolve_database_url(settings.database_url)

    sanitized = re.sub(r":([^:@/]+)@", ":***@", database_url)
    logger.info("Configuring database engine", url=sanitized)

    options: dict[str, Any] = {"echo": settings.database_echo}
    if database_url.startswith("sqlite"):
        # One shared connection keeps an in-memory database alive across sessions
        options["connect_args"] = {"check_same_thread": False}
        options["poolclass"] = StaticPool
    else:
        options["pool_size"] = settings.database_pool_size
        options["max_overflow"] = settings.database_max_overflow
        options["pool_pre_ping"] = True

    return create_async_engine(database_url, **options)


# Global engine and session factory
engine = create_engine()
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session with automatic cleanup."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# Type alias for dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def init_db() -> None:
    """Create tables for all registered models."""
    # Models must be imported so their tables are registered on Base.metadata
    import orderdesk.models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        logger.error("Database initialization failed", error=str(e))
        raise
    logger.info("Database initialized")


async def ping_db() -> bool:
    """Return True if the database answers a trivial query."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Database ping failed", error=str(e))
        return False
    return True


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
    logger.info("Database connections closed")
