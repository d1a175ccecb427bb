"""Database engine, session factory, and declarative base.

All onboarding tables live in one schema; every row that belongs to a
branch carries a `branch_id` column.

Session dependency for FastAPI:
  - get_db()  → yields an AsyncSession, commits on success, rolls back on error
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_size=20,
    max_overflow=10,
)

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


class Base(DeclarativeBase):
    """Base class for every mapped model."""
    pass


async def get_db() -> AsyncSession:
    """Yield a session for the duration of one request."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
