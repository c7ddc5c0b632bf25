from types import TracebackType

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...application.ports.outbound import UnitOfWork
from ...domain.errors import PersistenceError

logger = structlog.get_logger()


class SqlAlchemyUnitOfWork(UnitOfWork):
    """
    Groups account and credential writes on one session.

    Anything not committed by the end of the ``async with`` block is rolled
    back, whether the block raised or simply never called ``commit``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._committed = False

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self._committed = False
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._committed:
            return
        if exc_type is not None:
            logger.warning("Discarding uncommitted writes", error_type=exc_type.__name__)
        await self.rollback()

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            logger.error("Commit failed", error=str(e))
            await self.rollback()
            raise PersistenceError("database_error", "Failed to save changes") from e
        self._committed = True

    async def rollback(self) -> None:
        await self._session.rollback()
