# DB connections

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from pathlib import Path
import structlog

from app.models.base import Base
# Register tables on Base.metadata
import app.models.account  # noqa: F401
import app.models.dashboard  # noqa: F401
import app.models.datasource  # noqa: F401
import app.models.event  # noqa: F401

logger = structlog.get_logger()


class Database:
    """Async engine and session factory owned by one application instance.

    Created in the app lifespan and disposed at shutdown; request handlers
    receive sessions through ``get_db`` instead of importing a global engine.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = make_url(url)
        self.is_sqlite = self.url.get_backend_name() == "sqlite"

        engine_kwargs = {"echo": echo}
        if self.is_sqlite:
            self._ensure_sqlite_dir()
        else:
            engine_kwargs.update(pool_size=20, max_overflow=0)

        self.engine = create_async_engine(self.url, **engine_kwargs)

        if self.is_sqlite:
            # Cascading deletes need foreign keys, which SQLite leaves off
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

    def _ensure_sqlite_dir(self):
        database = self.url.database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)

    async def create_all(self):
        """Create any missing tables"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_tables_ready", backend=self.url.get_backend_name())

    async def dispose(self):
        await self.engine.dispose()
        logger.info("database_disposed")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Dependency for getting async database session"""
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
