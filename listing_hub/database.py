"""Database engine, session factory, and base model."""
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from listing_hub.config import settings


def _engine_options(url: str) -> dict:
    # SQLite uses a static pool; the sizing knobs only apply to Postgres.
    if url.startswith("sqlite"):
        return {"echo": settings.debug}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 1800,
        "echo": settings.debug,
    }


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass
