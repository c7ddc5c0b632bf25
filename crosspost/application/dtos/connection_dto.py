from uuid import UUID

from pydantic import BaseModel, Field

from ...domain.entities import AccountStatus, AccountType, ConnectedAccount
from ...domain.value_objects import ProviderName


class ConnectRequestDTO(BaseModel):
    workspace_id: str
    return_path: str | None = Field(None, max_length=2048)


class AuthorizationUrlDTO(BaseModel):
    authorization_url: str


class BlueskySessionRequestDTO(BaseModel):
    """Direct login with a Bluesky handle (or email) and an app password."""

    identifier: str = Field(..., min_length=1, max_length=255)
    app_password: str = Field(..., min_length=1, max_length=255)
    workspace_id: str

    def __repr__(self) -> str:
        return f"BlueskySessionRequestDTO(identifier={self.identifier!r}, workspace_id={self.workspace_id!r})"


class DisconnectRequestDTO(BaseModel):
    account_id: str
    workspace_id: str


class ConnectedAccountDTO(BaseModel):
    """Public view of a connected account. Never carries tokens."""

    id: UUID
    provider: ProviderName
    display_name: str
    handle: str | None = None
    avatar_url: str | None = None
    account_type: AccountType
    status: AccountStatus

    @classmethod
    def from_entity(cls, account: ConnectedAccount) -> "ConnectedAccountDTO":
        return cls(
            id=account.id,
            provider=account.provider,
            display_name=account.display_name,
            handle=account.handle,
            avatar_url=account.avatar_url,
            account_type=account.account_type,
            status=account.status,
        )


class BlueskySessionResponseDTO(BaseModel):
    success: bool = True
    account: ConnectedAccountDTO


class AckDTO(BaseModel):
    success: bool = True
