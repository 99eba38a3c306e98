"""
Database engine and request-scoped sessions.

PostgreSQL (asyncpg) in production. A ``sqlite+aiosqlite`` URL is accepted
for local runs; SQLite engines take no pool sizing arguments.
"""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from backend.parcelpro.core.config import settings


def build_engine(database_url: str) -> AsyncEngine:
    options = {"echo": settings.db_echo}
    if make_url(database_url).get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=True,
        )
    return create_async_engine(database_url, **options)


engine = build_engine(settings.database_url)

# Objects stay readable after commit; services refresh explicitly after updates.
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

Base = declarative_base()


async def get_db():
    """
    FastAPI dependency yielding one session per request.

    Anything left uncommitted when the request fails is rolled back.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
