import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...application.ports.outbound import AuditLog
from ...domain.entities import AuditRecord
from ...domain.errors import PersistenceError
from .models import AuditLogModel

logger = structlog.get_logger()


class SqlAlchemyAuditLog(AuditLog):
    """Writes audit records into ``audit_logs``. Each append commits on its own."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(self, record: AuditRecord) -> None:
        self._session.add(AuditLogModel.from_entity(record))
        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise PersistenceError("database_error", "Failed to write audit record") from e
