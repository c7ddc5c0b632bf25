from .connected_account import AccountStatus, AccountType, ConnectedAccount, Credential
from .publish import (
    PublishOutcome,
    PublishRequest,
    PublishResult,
    PublishStatus,
    PublishSummary,
)
from .workspace import (
    MANAGE_CONNECTION_ROLES,
    PUBLISH_ROLES,
    AuditRecord,
    WorkspaceRole,
)

__all__ = [
    "AccountStatus",
    "AccountType",
    "AuditRecord",
    "ConnectedAccount",
    "Credential",
    "MANAGE_CONNECTION_ROLES",
    "PUBLISH_ROLES",
    "PublishOutcome",
    "PublishRequest",
    "PublishResult",
    "PublishStatus",
    "PublishSummary",
    "WorkspaceRole",
]
