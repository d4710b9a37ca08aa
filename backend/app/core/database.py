"""
Async engine and sessions

The engine is built on first use so that importing models never needs a
reachable database. ``get_db`` is the request-scoped session dependency.
"""
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from app.core.config import settings

Base = declarative_base()

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None

ASYNC_DRIVERS = {
    "postgresql://": "postgresql+asyncpg://",
    "sqlite:///": "sqlite+aiosqlite:///",
}


def async_database_url(url: str) -> str:
    for plain, driver in ASYNC_DRIVERS.items():
        if url.startswith(plain):
            return driver + url[len(plain):]
    return url


def _engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        return {"poolclass": NullPool, "connect_args": {"check_same_thread": False}}
    if settings.ENVIRONMENT in ("development", "test"):
        return {"poolclass": NullPool}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,
    }


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        url = async_database_url(settings.DATABASE_URL)
        _engine = create_async_engine(url, echo=settings.DB_ECHO, **_engine_options(url))
    return _engine


def get_session_local() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(), expire_on_commit=False, autoflush=False
        )
    return _session_factory


def AsyncSessionLocal() -> AsyncSession:
    """Session outside a request (scripts, seeding)"""
    return get_session_local()()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Session per request.

    Services commit their own work; anything still pending when the
    endpoint returns is committed here, and any error rolls back.
    """
    async with get_session_local()() as session:
        try:
            yield session
            if session.new or session.dirty or session.deleted:
                await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create missing tables"""
    import app.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
