import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from property_listing.core.errors import InfrastructureError

logger = get_logger()


class SqlRepository:
    """
    Shared plumbing for the SQLAlchemy repositories: one session per
    operation, and every driver or connection fault surfaced as
    ``InfrastructureError``.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            logger.error("database_error", repository=type(self).__name__, error=str(e))
            raise InfrastructureError("Database unavailable") from e
