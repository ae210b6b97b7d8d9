"""Database Engine — the process-wide async engine and per-request sessions.

Invariants:
    - One engine per process, created by init_db from the FastAPI lifespan
    - A request session is always closed; a failed one is rolled back first
    - The stores already turn SQLAlchemy errors into StorageUnavailableError; the
      session only catches what escapes them (e.g. a failing close)

Design Decisions:
    - Pool sizing only for server databases; SQLite keeps its dialect default pool
    - expire_on_commit=False: records built after a commit need no reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from maintainership.core.errors import StorageUnavailableError

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Owns the engine; hands out one AsyncSession per request."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.backend = make_url(database_url).get_backend_name()
        options: dict = {"pool_pre_ping": True}
        if self.backend != "sqlite":
            options.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **options)
        self._sessions = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        db = self._sessions()
        try:
            yield db
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                f"Request session failed on {self.backend}: {e}",
                extra={"operation": "request session"},
            )
            raise StorageUnavailableError("complete the request", str(e)) from e
        finally:
            await db.close()

    async def health_check(self) -> bool:
        """True when a trivial query round-trips (readiness probe)."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Readiness check failed: {e}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> None:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
