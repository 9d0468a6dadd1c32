from collections.abc import AsyncGenerator
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from esg_api.core.config import settings

logger = structlog.get_logger()


def _engine_kwargs(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        # SQLite enforces foreign keys only when asked to; see _enable_sqlite_fks
        return {}
    return {
        "pool_size": 10,
        "max_overflow": 10,
        "pool_pre_ping": True,               # Drop stale connections before use
        "pool_recycle": 1800,                 # Recycle connections every 30 min
        "pool_timeout": 30,                   # Wait max 30s for a pool connection before raising
    }


def build_engine(url: str, **overrides: Any) -> AsyncEngine:
    kwargs = _engine_kwargs(url)
    kwargs.update(overrides)
    eng = create_async_engine(url, echo=settings.APP_DEBUG, **kwargs)
    if url.startswith("sqlite"):
        _enable_sqlite_fks(eng)
    return eng


def _enable_sqlite_fks(eng: AsyncEngine) -> None:
    from sqlalchemy import event

    @event.listens_for(eng.sync_engine, "connect")
    def _set_pragma(dbapi_connection, _record) -> None:  # type: ignore[no-untyped-def]
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = build_engine(settings.DATABASE_URL)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncGenerator[AsyncSession]:
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db(eng: AsyncEngine | None = None) -> None:
    """Create any missing tables. Idempotent."""
    import esg_api.models  # noqa: F401  register all models on Base.metadata

    async with (eng or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_tables_ensured")


async def close_db() -> None:
    await engine.dispose()
