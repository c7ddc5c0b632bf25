from .outbound import (
    AccountRepository,
    AuditLog,
    CredentialRepository,
    ProviderAdapter,
    UnitOfWork,
    WorkspaceMembershipRepository,
)

__all__ = [
    "AccountRepository",
    "AuditLog",
    "CredentialRepository",
    "ProviderAdapter",
    "UnitOfWork",
    "WorkspaceMembershipRepository",
]
