from abc import ABC, abstractmethod
from collections.abc import Sequence
from uuid import UUID

from ....domain.entities import AuditRecord, ConnectedAccount, Credential, WorkspaceRole
from ....domain.value_objects import ProviderName


class AccountRepository(ABC):
    """Output port for connected account persistence."""

    @abstractmethod
    async def upsert(self, account: ConnectedAccount) -> ConnectedAccount:
        """Insert, or update the row keyed by (workspace, provider, provider_account_id).

        Returns the stored account, whose id is the existing row's id on update.
        """
        ...

    @abstractmethod
    async def find_by_identity(
        self, workspace_id: UUID, provider: ProviderName, provider_account_id: str
    ) -> ConnectedAccount | None:
        ...

    @abstractmethod
    async def get_connected(
        self, workspace_id: UUID, account_ids: Sequence[UUID]
    ) -> list[ConnectedAccount]:
        """Accounts among account_ids that belong to the workspace and are connected."""
        ...

    @abstractmethod
    async def delete(self, account_id: UUID, workspace_id: UUID) -> bool:
        """Delete the account and its credential. Returns False if nothing matched."""
        ...


class CredentialRepository(ABC):
    """Output port for token storage."""

    @abstractmethod
    async def upsert(self, credential: Credential) -> None:
        ...

    @abstractmethod
    async def get_for_accounts(self, account_ids: Sequence[UUID]) -> dict[UUID, Credential]:
        ...


class AuditLog(ABC):
    """Output port for the append-only audit table."""

    @abstractmethod
    async def append(self, record: AuditRecord) -> None:
        ...


class WorkspaceMembershipRepository(ABC):
    """Read-only view of workspace membership."""

    @abstractmethod
    async def get_role(self, workspace_id: UUID, user_id: str) -> WorkspaceRole | None:
        ...
