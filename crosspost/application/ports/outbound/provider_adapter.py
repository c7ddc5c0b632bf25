"""
Outbound port for social platform integrations.

Each provider implements this interface once; the application layer depends
on this abstraction and looks adapters up through a registry.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ....domain.entities import AccountType
from ....domain.value_objects import MediaType, ProviderConfig, ProviderName


@dataclass(frozen=True)
class TokenGrant:
    """Normalized token endpoint (or session) response."""

    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    scope: str | None = None
    token_type: str | None = None
    provider_user_id: str | None = None  # Some providers return it with the token

    def __repr__(self) -> str:
        return f"TokenGrant(expires_in={self.expires_in!r}, scope={self.scope!r})"


@dataclass(frozen=True)
class ProviderIdentity:
    """Normalized "who am I" answer."""

    provider_account_id: str
    display_name: str
    account_type: AccountType
    handle: str | None = None
    avatar_url: str | None = None


@dataclass(frozen=True)
class ProviderError:
    """Provider error payload reduced to one shape."""

    message: str
    code: str | None = None


@dataclass
class PublishReceipt:
    """Result of a provider publish attempt."""

    success: bool
    post_id: str | None = None
    post_url: str | None = None
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def failed(cls, error: ProviderError) -> "PublishReceipt":
        return cls(success=False, error=error.message, error_code=error.code)


class ProviderAdapter(ABC):
    """
    Outbound port for one social platform.

    Authentication header placement, payload shape and media handling differ
    per platform, so every provider ships its own adapter.
    """

    @property
    @abstractmethod
    def provider(self) -> ProviderName:
        """Return the provider this adapter handles."""
        ...

    @property
    @abstractmethod
    def config(self) -> ProviderConfig:
        ...

    @abstractmethod
    def authorization_params(
        self,
        client_id: str,
        redirect_uri: str,
        state: str,
        code_verifier: str,
    ) -> dict[str, str]:
        """Query parameters for the provider's authorization URL."""
        ...

    @abstractmethod
    async def exchange_code(
        self,
        code: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        code_verifier: str,
    ) -> TokenGrant:
        """
        Exchange an authorization code for tokens.

        Raises:
            OAuthError: carrying the provider's reported reason
        """
        ...

    @abstractmethod
    async def fetch_identity(self, grant: TokenGrant) -> ProviderIdentity:
        """
        Resolve the account behind a token.

        Raises:
            OAuthError: If the provider does not return a usable identity
        """
        ...

    @abstractmethod
    async def publish(
        self,
        provider_account_id: str,
        access_token: str,
        content: str,
        link_url: str | None = None,
        media_url: str | None = None,
        media_type: MediaType | None = None,
    ) -> PublishReceipt:
        """
        Publish content to the account.

        Returns:
            PublishReceipt; provider rejections come back as success=False
        """
        ...


class AdapterLookup(ABC):
    """Maps a provider name to its adapter."""

    @abstractmethod
    def get(self, provider: ProviderName) -> ProviderAdapter:
        """
        Raises:
            ValueError: If the provider is not supported
        """
        ...


class DirectAuthAdapter(ProviderAdapter):
    """Adapter for a provider that logs in with account credentials instead of OAuth."""

    @abstractmethod
    async def create_session(self, identifier: str, secret: str) -> TokenGrant:
        """
        Exchange account credentials for a session token.

        Raises:
            AuthenticationError: ``invalid_credentials`` if the provider rejects them
        """
        ...
