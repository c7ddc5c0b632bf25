from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class WorkspaceRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    EDITOR = "editor"
    APPROVER = "approver"
    VIEWER = "viewer"


PUBLISH_ROLES = frozenset({WorkspaceRole.OWNER, WorkspaceRole.ADMIN, WorkspaceRole.EDITOR})
MANAGE_CONNECTION_ROLES = frozenset({WorkspaceRole.OWNER, WorkspaceRole.ADMIN, WorkspaceRole.EDITOR})


@dataclass(frozen=True)
class AuditRecord:
    """Append-only audit log entry."""

    id: UUID
    workspace_id: UUID
    actor_user_id: str
    action: str
    entity_type: str
    created_at: datetime
    entity_id: UUID | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        workspace_id: UUID,
        actor_user_id: str,
        action: str,
        entity_type: str,
        details: dict[str, Any] | None = None,
        entity_id: UUID | None = None,
    ) -> "AuditRecord":
        return cls(
            id=uuid4(),
            workspace_id=workspace_id,
            actor_user_id=actor_user_id,
            action=action,
            entity_type=entity_type,
            created_at=datetime.now(UTC),
            entity_id=entity_id,
            details=details or {},
        )
