"""
Database Connection Module

Owns the single async engine shared by the whole process, the session
factory handed to each request, the declarative base, the idempotent
category seed and the ``atomic`` transaction boundary used by every
multi-statement write.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from espetinho.core.config import get_settings
from espetinho.core.exceptions import NotFoundError, TransactionError, ValidationError

logger = logging.getLogger(__name__)

settings = get_settings()


# Base class for all our models
class Base(DeclarativeBase):
    pass


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores FOREIGN KEY clauses unless the pragma is set per connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str, echo: bool = False, **engine_options: Any) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    Args:
        url: SQLAlchemy async URL (sqlite+aiosqlite, postgresql+psycopg, ...)
        echo: Log all SQL statements
        **engine_options: Passed through to create_async_engine (poolclass, ...)

    Returns:
        AsyncEngine with foreign keys enforced on SQLite
    """
    engine = create_async_engine(url, echo=echo, **engine_options)
    if url.startswith("sqlite"):
        enable_sqlite_foreign_keys(engine)
    return engine


# Create async engine
engine = build_engine(settings.database_url, echo=settings.sql_echo)

# Session factory - creates new database sessions
async_session_maker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False  # Objects remain accessible after commit
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Dependency injection for FastAPI routes.
    Yields a database session and ensures cleanup.
    """
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


# =============================================================================
# TRANSACTION BOUNDARY
# =============================================================================

@asynccontextmanager
async def atomic(session: AsyncSession, operation: str) -> AsyncIterator[AsyncSession]:
    """
    Run a logical unit of work: commit everything or nothing.

    Domain errors raised inside the block (validation, not found) roll back
    and propagate unchanged. Storage errors roll back and are surfaced as
    ``TransactionError`` chained to the original exception.

    Args:
        session: Session owned by the current request
        operation: Short description used in logs and error messages

    Example:
        >>> async with atomic(session, "criar produto"):
        ...     stock = await stock_repo.insert(...)
        ...     await product_repo.insert(stock_id=stock.id, ...)
    """
    try:
        yield session
        await session.commit()
    except (ValidationError, NotFoundError):
        await session.rollback()
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Rollback while trying to {operation}: {e}")
        raise TransactionError(operation) from e


# =============================================================================
# SCHEMA & SEED
# =============================================================================

DEFAULT_CATEGORIES = (
    (1, "ESPETOS", "Categoria para todos os tipos de espetinhos"),
    (2, "BEBIDAS", "Categoria para bebidas em geral"),
    (3, "INSUMOS", "Categoria para insumos e materiais"),
)


async def seed_categories(session: AsyncSession) -> int:
    """
    Insert the fixed categories that are missing.

    Returns:
        Number of categories inserted (0 on every run after the first)
    """
    from espetinho.models import Category

    inserted = 0
    for category_id, name, description in DEFAULT_CATEGORIES:
        if await session.get(Category, category_id) is None:
            session.add(Category(id=category_id, name=name, description=description))
            inserted += 1
    await session.commit()
    return inserted


async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    """
    Create all tables and seed the category registry.
    Called once at application startup.
    """
    # Register every mapped class on Base.metadata
    import espetinho.models  # noqa: F401

    bind = bind or engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(bind=bind, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        inserted = await seed_categories(session)

    logger.info(f"Database tables ready ({inserted} categories seeded)")
