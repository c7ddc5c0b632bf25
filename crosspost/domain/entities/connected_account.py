from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from uuid import UUID, uuid4

from ..value_objects import ProviderName


class AccountStatus(str, Enum):
    CONNECTED = "connected"
    NEEDS_REFRESH = "needs_refresh"
    DISCONNECTED = "disconnected"
    ERROR = "error"


class AccountType(str, Enum):
    PAGE = "page"
    PROFILE = "profile"
    BUSINESS = "business"
    CREATOR = "creator"
    PERSONAL = "personal"


@dataclass
class ConnectedAccount:
    """A third-party account owned by a workspace."""

    id: UUID
    workspace_id: UUID
    provider: ProviderName
    provider_account_id: str
    display_name: str
    account_type: AccountType
    status: AccountStatus
    last_connected_at: datetime
    created_at: datetime
    updated_at: datetime
    handle: str | None = None
    avatar_url: str | None = None
    autopublish_capable: bool = True

    @classmethod
    def create(
        cls,
        workspace_id: UUID,
        provider: ProviderName,
        provider_account_id: str,
        display_name: str,
        account_type: AccountType,
        handle: str | None = None,
        avatar_url: str | None = None,
    ) -> "ConnectedAccount":
        """Factory method for a freshly connected account."""
        now = datetime.now(UTC)
        return cls(
            id=uuid4(),
            workspace_id=workspace_id,
            provider=provider,
            provider_account_id=provider_account_id,
            display_name=display_name,
            account_type=account_type,
            status=AccountStatus.CONNECTED,
            last_connected_at=now,
            created_at=now,
            updated_at=now,
            handle=handle,
            avatar_url=avatar_url,
        )

    @property
    def is_publishable(self) -> bool:
        return self.status == AccountStatus.CONNECTED

    def reconnect(self, other: "ConnectedAccount") -> None:
        """Refresh identity fields from a new connection of the same external account."""
        if (self.workspace_id, self.provider, self.provider_account_id) != (
            other.workspace_id,
            other.provider,
            other.provider_account_id,
        ):
            raise ValueError("Cannot reconnect a different external account")
        self.display_name = other.display_name
        self.handle = other.handle
        self.avatar_url = other.avatar_url
        self.account_type = other.account_type
        self.autopublish_capable = other.autopublish_capable
        self.status = AccountStatus.CONNECTED
        self.last_connected_at = other.last_connected_at
        self.updated_at = datetime.now(UTC)

    def mark_needs_refresh(self) -> None:
        if self.status != AccountStatus.CONNECTED:
            raise ValueError(f"Cannot mark {self.status.value} account as needs_refresh")
        self.status = AccountStatus.NEEDS_REFRESH
        self.updated_at = datetime.now(UTC)

    def mark_error(self) -> None:
        self.status = AccountStatus.ERROR
        self.updated_at = datetime.now(UTC)


@dataclass
class Credential:
    """Provider tokens for one ConnectedAccount. Never leaves the core."""

    account_id: UUID
    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None
    scope: str | None = None
    token_type: str = "Bearer"

    @classmethod
    def create(
        cls,
        account_id: UUID,
        access_token: str,
        refresh_token: str | None = None,
        expires_in: int | None = None,
        scope: str | None = None,
        token_type: str | None = None,
    ) -> "Credential":
        expires_at = datetime.now(UTC) + timedelta(seconds=expires_in) if expires_in else None
        return cls(
            account_id=account_id,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at,
            scope=scope,
            token_type=token_type or "Bearer",
        )

    def __repr__(self) -> str:
        return f"Credential(account_id={self.account_id!s}, expires_at={self.expires_at!r})"
