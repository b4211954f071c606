"""
Async engine and session handling for the database backend.

One engine per process, created lazily from ``storage.dsn``. Everything
persisted lives in the single storage_entries table, so the schema is
created with ``create_all`` and has no migrations.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from ..utils.config import get_config
from ..utils.logger import get_logger

logger = get_logger("storage.db")

_engine: Optional[AsyncEngine] = None
_async_session_maker: Optional[sessionmaker] = None


def _prepare_sqlite_path(dsn: str) -> None:
    # SQLite creates the file but not its directory
    url = make_url(dsn)
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)


async def init_database(dsn: Optional[str] = None) -> AsyncEngine:
    global _engine, _async_session_maker

    if _engine is not None:
        return _engine

    config = get_config().storage
    dsn = dsn or config.dsn
    _prepare_sqlite_path(dsn)

    logger.info(f"Opening rule storage at {make_url(dsn).render_as_string(hide_password=True)}")

    _engine = create_async_engine(dsn, echo=config.echo)
    _async_session_maker = sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return _engine


async def close_database() -> None:
    global _engine, _async_session_maker

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_maker = None
        logger.debug("Rule storage closed")


def get_engine() -> AsyncEngine:
    if _engine is None:
        raise RuntimeError("Storage not opened. Call init_database() first.")
    return _engine


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """One unit of work: committed on success, rolled back on any error."""
    if _async_session_maker is None:
        await init_database()

    async with _async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    from .models import Base

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug("storage_entries table ready")
