from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool

from app.core.config import Settings


def is_document_url(url: str) -> bool:
    return url.startswith(("mongodb://", "mongodb+srv://"))


def is_memory_sqlite(url: str) -> bool:
    parsed = make_url(url)
    return parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:")


def build_engine(settings: Settings) -> AsyncEngine:
    url = make_url(settings.DATABASE_URL)
    if is_memory_sqlite(settings.DATABASE_URL):
        # The database lives in its single connection: sessions queue for it
        # one at a time instead of interleaving transactions on it.
        return create_async_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=AsyncAdaptedQueuePool,
            pool_size=1,
            max_overflow=0,
            pool_timeout=settings.STORE_TIMEOUT_SEC,
        )
    if url.get_backend_name() == "sqlite":
        return create_async_engine(
            url,
            connect_args={"timeout": settings.STORE_TIMEOUT_SEC},
        )
    return create_async_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False)
