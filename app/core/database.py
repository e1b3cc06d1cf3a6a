# app/core/database.py

"""
Database connection and session management for the SQL storage backend.

- Builds the async SQLAlchemy engine from `settings.DATABASE_URL`.
- Provides the session factory used by `DatabaseStorageProvider`.
- Creates the tables at startup (no migrations).
"""

import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker

from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings

# every table model must be imported so that it is registered on SQLModel.metadata
import app.domains.models  # noqa

logger = logging.getLogger(__name__)


def build_engine(url: str) -> AsyncEngine:
    """
    Async engine for `url`. Pool sizing only applies to server databases;
    SQLite uses SQLAlchemy's default pool.
    """
    options = {"echo": settings.DEBUG_MODE, "future": True}
    if not url.startswith("sqlite"):
        options.update(pool_recycle=3600, pool_size=10, max_overflow=20)
    return create_async_engine(url, **options)


engine: AsyncEngine = build_engine(settings.DATABASE_URL.get_secret_value())

AsyncSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

metadata = SQLModel.metadata


# =============================================================================
# table creation
# =============================================================================
async def create_db_and_tables(bind: AsyncEngine = engine) -> None:
    """Create every missing table. Existing tables are left untouched."""
    async with bind.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables are ready")


# =============================================================================
# session dependency
# =============================================================================
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """One session per request, closed when the request ends."""
    async with AsyncSessionLocal() as session:
        yield session
