"""
Database session configuration.

One async engine for the ledger. PostgreSQL (asyncpg) in production, where
row locks and `lock_timeout` back the transaction discipline in
`db/transaction.py`. A SQLite URL is accepted for local runs; there the
busy timeout plays the part of the lock timeout.
"""

from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from backend.app.core.config import settings


def engine_options(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        return {"connect_args": {"timeout": settings.lock_timeout_ms / 1000}}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": True,
        "connect_args": {"server_settings": {"application_name": settings.app_name, "timezone": "UTC"}},
    }


engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    **engine_options(settings.database_url),
)

# Objects stay readable after commit: services return the rows they just wrote
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


def utcnow() -> datetime:
    """Python-side timestamp default, so inserted rows never need a refresh."""
    return datetime.now(timezone.utc)


async def get_db():
    """FastAPI dependency: one session per request, closed afterwards."""
    async with AsyncSessionLocal() as session:
        yield session
