from collections.abc import AsyncGenerator

from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session, sessionmaker

from travel_portal.core.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.APP_ENV == "development",
    pool_pre_ping=True,
    pool_size=10,
    max_overflow=20,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# ─── Sync sessions (Celery workers are synchronous) ───

_sync_factory: sessionmaker | None = None


def get_sync_session() -> Session:
    """Return a sync SQLAlchemy session bound to a shared engine. Caller must close it."""
    global _sync_factory
    if _sync_factory is None:
        sync_engine = create_engine(settings.DATABASE_URL_SYNC, pool_pre_ping=True)
        _sync_factory = sessionmaker(bind=sync_engine, expire_on_commit=False)
    return _sync_factory()
