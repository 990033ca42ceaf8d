"""
Database engine and session management.

Async SQLAlchemy engine with a connection pool, declarative base,
and FastAPI dependency for per-request sessions.
"""

from typing import Any, AsyncGenerator

from loguru import logger
from sqlalchemy import event, func, select, text
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, **kwargs: Any) -> AsyncEngine:
    """
    Create async engine for the given URL.

    Pool sizing applies to server databases only. SQLite connections
    get foreign key enforcement switched on.
    """
    if make_url(url).get_backend_name() == "sqlite":
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = create_async_engine(url, echo=settings.debug, **kwargs)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_async_engine(
        url,
        echo=settings.debug,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,
        **kwargs,
    )


engine = build_engine(settings.database_url)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a database session per request."""
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def ping_db(session: AsyncSession) -> bool:
    """Check the store is reachable."""
    await session.execute(text("SELECT 1"))
    return True


async def seed_categories(session: AsyncSession, names: list[str]) -> int:
    """
    Insert default categories when the table is empty.

    Returns:
        Number of categories created
    """
    from app.models.forum import Category

    count = await session.scalar(select(func.count()).select_from(Category))
    if count:
        return 0

    for index, name in enumerate(names):
        session.add(Category(name=name, sort_order=index))
    await session.commit()
    return len(names)


async def init_db() -> None:
    """Create tables and seed default categories."""
    # Register models on the metadata
    from app.models import forum, user  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        created = await seed_categories(session, settings.forum_default_categories)
        if created:
            logger.info(f"Seeded {created} default categories")


async def close_db() -> None:
    """Dispose connection pool."""
    await engine.dispose()
