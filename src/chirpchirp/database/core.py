import contextlib
import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,  # type: ignore[attr-defined]
    create_async_engine,
)
from sqlmodel import SQLModel

# Registers the images/attributions tables on SQLModel.metadata
from chirpchirp.images import models  # noqa: F401

logger = logging.getLogger(__name__)


def build_database_url(url: str, credential: str | None = None) -> URL:
    """Combine the storage endpoint and credential into a SQLAlchemy URL.

    The credential is only attached to network databases; file-based SQLite
    URLs have no host and are returned unchanged.
    """
    database_url = make_url(url)
    if credential and database_url.host:
        database_url = database_url.set(password=credential)
    return database_url


class CoreDatabaseService:
    """Holds the process-wide connection to the image and attribution store."""

    def __init__(
        self,
        url: str,
        credential: str | None = None,
        echo: bool = False,
        pool_pre_ping: bool = True,
    ):
        self.db_url = build_database_url(url, credential)

        self.async_engine = create_async_engine(
            self.db_url,
            echo=echo,
            pool_pre_ping=pool_pre_ping,
            pool_recycle=3600,  # Recycle connections every hour
        )

        self.async_session_local = async_sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.async_engine,
            class_=AsyncSession,
        )

    async def initialize(self) -> None:
        """Create any missing tables.

        The production store is managed externally; this is used for local
        development databases and tests.
        """
        async with self.async_engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Database tables ensured on %s", self.db_url.render_as_string())

    @contextlib.asynccontextmanager
    async def get_async_db(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide an async database session for dependency injection."""
        async with self.async_session_local() as session:
            yield session

    async def ping(self) -> bool:
        """Check that the store answers a trivial query.

        Returns:
            True when the store responded, False otherwise
        """
        async with self.get_async_db() as session:
            try:
                await session.execute(text("SELECT 1"))
                return True
            except SQLAlchemyError as e:
                logger.error("Database ping failed: %s", e)
                return False

    async def dispose(self) -> None:
        """Dispose of the database engine to release pooled connections."""
        if self.async_engine:
            await self.async_engine.dispose()
            logger.debug("Async database engine disposed")
