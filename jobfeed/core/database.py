"""
Async engine and unit-of-work sessions for the job store
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool
import structlog

from config import settings

logger = structlog.get_logger(__name__)


def engine_options(url: str, pool_size: int, max_overflow: int) -> dict[str, Any]:
    """Pool configuration for a database URL"""
    if url.startswith("sqlite"):
        # An in-memory database only exists on the connection that made it
        return {"poolclass": StaticPool if ":memory:" in url else NullPool}
    if not settings.is_production:
        return {"poolclass": NullPool}
    return {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }


class DatabaseManager:
    """
    Owns the async engine for one database URL.

    ``session()`` is a unit of work: it commits when the block exits
    cleanly and rolls back when it raises.
    """

    def __init__(self) -> None:
        self._engine: Optional[AsyncEngine] = None
        self._sessions: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_initialized(self) -> bool:
        return self._sessions is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database not initialized")
        return self._engine

    async def initialize(
        self,
        database_url: Optional[str] = None,
        pool_size: int = 10,
        max_overflow: int = 5,
        echo: bool = False,
    ) -> None:
        url = database_url or settings.database.url.get_secret_value()
        options = engine_options(url, pool_size, max_overflow)

        self._engine = create_async_engine(url, echo=echo or settings.debug, **options)
        self._sessions = async_sessionmaker(
            self._engine,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info(
            "Database engine ready",
            dialect=self._engine.dialect.name,
            pooled="pool_size" in options,
        )

    async def create_all(self) -> None:
        """Create the jobs schema if it does not exist"""
        from jobfeed.discovery import models  # noqa: F401  registers StoredJob
        from .models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready", tables=sorted(Base.metadata.tables))

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessions = None
            logger.info("Database engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self._sessions is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        async with self._sessions() as session:
            try:
                async with session.begin():
                    yield session
            except SQLAlchemyError as e:
                logger.error("Database transaction rolled back", error=str(e))
                raise

    async def health_check(self) -> dict:
        if self._engine is None:
            return {"healthy": False, "error": "Database not initialized"}

        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database health check failed", error=str(e))
            return {"healthy": False, "error": str(e)}
        return {"healthy": True, "dialect": self._engine.dialect.name}


# Shared instance
db_manager = DatabaseManager()


async def init_db(create_schema: bool = True) -> None:
    """Initialize the shared engine from settings"""
    await db_manager.initialize(
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
        echo=settings.database.echo,
    )
    if create_schema:
        await db_manager.create_all()


async def close_db() -> None:
    await db_manager.close()
