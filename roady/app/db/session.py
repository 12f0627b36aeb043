"""
Database engine and session management.

Trips and points live in PostgreSQL (asyncpg) in production; a local
``sqlite+aiosqlite`` URL is accepted for development and tests.
"""

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from roady.app.core.config import settings

# Same constraint names on PostgreSQL and SQLite
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def engine_options(database_url: str) -> dict:
    """Pool sizing only applies to server databases."""
    options = {"echo": settings.db_echo, "future": True}
    if not database_url.startswith("sqlite"):
        options["pool_size"] = settings.db_pool_size
        options["max_overflow"] = settings.db_max_overflow
        options["pool_pre_ping"] = True
    return options


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))


async def get_db():
    """
    FastAPI dependency for database sessions.

    One session per request; every mutation of that request commits or rolls
    back on it.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
