import structlog

from ...domain.entities import AuditRecord
from ..ports.outbound import AuditLog

logger = structlog.get_logger()


async def record_audit(audit_log: AuditLog | None, record: AuditRecord) -> None:
    """Append an audit record. A failed write is logged and never fails the caller."""
    if audit_log is None:
        return
    try:
        await audit_log.append(record)
    except Exception as e:
        logger.error(
            "Audit write failed",
            action=record.action,
            workspace_id=str(record.workspace_id),
            error=str(e),
        )
