from .provider_adapter import (
    AdapterLookup,
    DirectAuthAdapter,
    ProviderAdapter,
    ProviderError,
    ProviderIdentity,
    PublishReceipt,
    TokenGrant,
)
from .repositories import (
    AccountRepository,
    AuditLog,
    CredentialRepository,
    WorkspaceMembershipRepository,
)
from .state_signer import StateSigner
from .unit_of_work import UnitOfWork

__all__ = [
    "AccountRepository",
    "AdapterLookup",
    "DirectAuthAdapter",
    "AuditLog",
    "CredentialRepository",
    "ProviderAdapter",
    "ProviderError",
    "ProviderIdentity",
    "PublishReceipt",
    "StateSigner",
    "TokenGrant",
    "UnitOfWork",
    "WorkspaceMembershipRepository",
]
