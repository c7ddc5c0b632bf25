"""
Connection Manager: OAuth authorization-code flows and direct logins.

Every provider's token and identity responses are normalized by its adapter;
this service owns state signing, access checks and the atomic
account + credential upsert.
"""

from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import urlencode
from uuid import UUID

import structlog

from ...domain.entities import (
    MANAGE_CONNECTION_ROLES,
    AuditRecord,
    ConnectedAccount,
    Credential,
)
from ...domain.errors import (
    ConfigurationError,
    OAuthError,
    RequestValidationError,
)
from ...domain.validation import validate_identifier
from ...domain.value_objects import (
    OAuthState,
    ProviderConfig,
    ProviderName,
    get_provider_config,
    safe_return_path,
)
from ..ports.outbound import (
    AccountRepository,
    AdapterLookup,
    AuditLog,
    CredentialRepository,
    DirectAuthAdapter,
    ProviderIdentity,
    StateSigner,
    TokenGrant,
    UnitOfWork,
)
from .audit import record_audit
from .workspace_access import WorkspaceAccessService

logger = structlog.get_logger()


@dataclass(frozen=True)
class OAuthClient:
    """This deployment's registered OAuth app for one provider."""

    client_id: str
    client_secret: str
    redirect_uri: str

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


def parse_provider(provider: str | ProviderName) -> ProviderName:
    try:
        return ProviderName(provider)
    except ValueError:
        raise RequestValidationError(
            "unsupported_provider", f"Unsupported provider: {provider}"
        ) from None


class ConnectionService:
    """Connects and disconnects third-party accounts for a workspace."""

    def __init__(
        self,
        accounts: AccountRepository,
        credentials: CredentialRepository,
        uow: UnitOfWork,
        access: WorkspaceAccessService,
        adapters: AdapterLookup,
        signer: StateSigner,
        clients: Callable[[ProviderName], OAuthClient],
        audit_log: AuditLog | None = None,
    ) -> None:
        self._accounts = accounts
        self._credentials = credentials
        self._uow = uow
        self._access = access
        self._adapters = adapters
        self._signer = signer
        self._clients = clients
        self._audit_log = audit_log

    def _oauth_config(self, provider: ProviderName) -> ProviderConfig:
        config = get_provider_config(provider)
        if not config.uses_oauth:
            raise RequestValidationError(
                "direct_auth_required",
                f"{config.display_name} connects with account credentials, not OAuth",
            )
        return config

    def _client(self, provider: ProviderName, config: ProviderConfig) -> OAuthClient:
        client = self._clients(provider)
        if not client.is_configured:
            raise ConfigurationError(
                "provider_not_configured", f"{config.display_name} is not configured"
            )
        return client

    async def initiate_connection(
        self,
        user_id: str,
        workspace_id: str,
        provider: str,
        return_path: str | None = None,
    ) -> str:
        """
        Build the provider authorization URL for a new connection.

        Raises:
            RequestValidationError: Unknown or non-OAuth provider, bad workspace id
            AuthorizationError: Caller may not manage connections in the workspace
            ConfigurationError: No OAuth client configured for the provider
        """
        provider_name = parse_provider(provider)
        config = self._oauth_config(provider_name)
        workspace = validate_identifier(workspace_id)
        await self._access.require_role(workspace, user_id, MANAGE_CONNECTION_ROLES)
        client = self._client(provider_name, config)

        state = OAuthState(
            user_id=user_id,
            workspace_id=str(workspace),
            provider=provider_name.value,
            return_path=safe_return_path(return_path),
        )
        params = self._adapters.get(provider_name).authorization_params(
            client_id=client.client_id,
            redirect_uri=client.redirect_uri,
            state=self._signer.encode(state),
            code_verifier=self._signer.code_verifier(state),
        )

        logger.info(
            "OAuth connection initiated",
            provider=provider_name.value,
            workspace_id=str(workspace),
        )
        return f"{config.authorization_url}?{urlencode(params)}"

    def verify_state(self, provider: str, state_token: str | None) -> OAuthState:
        """
        Decode a callback's state and check it was issued for this provider.

        Raises:
            OAuthError: ``invalid_state``
        """
        state = self._signer.decode(state_token)
        if state.provider != provider:
            logger.warning("OAuth state provider mismatch", provider=provider, expected=state.provider)
            raise OAuthError("invalid_state", "State was issued for a different provider")
        return state

    async def complete_connection(
        self, provider: str, code: str, state_token: str | None
    ) -> ConnectedAccount:
        """
        Finish an OAuth flow: verify state, exchange the code, store the account.

        Raises:
            OAuthError: Bad state, or the provider rejected the exchange
            PersistenceError: The account could not be stored; nothing was written
        """
        provider_name = parse_provider(provider)
        config = self._oauth_config(provider_name)
        state = self.verify_state(provider_name.value, state_token)
        if not code:
            raise OAuthError("missing_code", "Authorization code is missing")
        client = self._client(provider_name, config)

        adapter = self._adapters.get(provider_name)
        grant = await adapter.exchange_code(
            code=code,
            client_id=client.client_id,
            client_secret=client.client_secret,
            redirect_uri=client.redirect_uri,
            code_verifier=self._signer.code_verifier(state),
        )
        identity = await adapter.fetch_identity(grant)

        return await self._store(
            UUID(state.workspace_id), provider_name, identity, grant, actor_user_id=state.user_id
        )

    async def authenticate_direct(
        self,
        identifier: str,
        app_password: str,
        user_id: str,
        workspace_id: str,
        provider: str = ProviderName.BLUESKY.value,
    ) -> ConnectedAccount:
        """
        Connect an account that logs in with credentials (Bluesky app passwords).

        Raises:
            AuthenticationError: ``invalid_credentials``
        """
        provider_name = parse_provider(provider)
        workspace = validate_identifier(workspace_id)
        await self._access.require_role(workspace, user_id, MANAGE_CONNECTION_ROLES)

        adapter = self._adapters.get(provider_name)
        if not isinstance(adapter, DirectAuthAdapter):
            raise RequestValidationError(
                "oauth_required", f"{adapter.config.display_name} connects through OAuth"
            )

        grant = await adapter.create_session(identifier.strip().lstrip("@"), app_password)
        identity = await adapter.fetch_identity(grant)
        return await self._store(workspace, provider_name, identity, grant, actor_user_id=user_id)

    async def disconnect(self, account_id: str, workspace_id: str, user_id: str) -> bool:
        """
        Remove an account and its credential. Idempotent.

        Returns:
            True if an account was deleted, False if there was nothing to delete
        """
        account = validate_identifier(account_id)
        workspace = validate_identifier(workspace_id)
        await self._access.require_role(workspace, user_id, MANAGE_CONNECTION_ROLES)

        async with self._uow:
            deleted = await self._accounts.delete(account, workspace)
            await self._uow.commit()

        if not deleted:
            logger.info("Disconnect ignored, account not found", account_id=str(account))
            return False

        logger.info("Account disconnected", account_id=str(account), workspace_id=str(workspace))
        await record_audit(
            self._audit_log,
            AuditRecord.create(
                workspace_id=workspace,
                actor_user_id=user_id,
                action="social_account.disconnected",
                entity_type="social_account",
                entity_id=account,
            ),
        )
        return True

    async def _store(
        self,
        workspace_id: UUID,
        provider: ProviderName,
        identity: ProviderIdentity,
        grant: TokenGrant,
        actor_user_id: str,
    ) -> ConnectedAccount:
        """Upsert the account and its credential in one transaction."""
        candidate = ConnectedAccount.create(
            workspace_id=workspace_id,
            provider=provider,
            provider_account_id=identity.provider_account_id,
            display_name=identity.display_name,
            account_type=identity.account_type,
            handle=identity.handle,
            avatar_url=identity.avatar_url,
        )

        async with self._uow:
            existing = await self._accounts.find_by_identity(
                workspace_id, provider, identity.provider_account_id
            )
            if existing:
                existing.reconnect(candidate)
                candidate = existing

            account = await self._accounts.upsert(candidate)
            await self._credentials.upsert(
                Credential.create(
                    account_id=account.id,
                    access_token=grant.access_token,
                    refresh_token=grant.refresh_token,
                    expires_in=grant.expires_in,
                    scope=grant.scope,
                    token_type=grant.token_type,
                )
            )
            await self._uow.commit()

        logger.info(
            "Account connected",
            provider=provider.value,
            account_id=str(account.id),
            workspace_id=str(workspace_id),
            reconnected=existing is not None,
        )
        await record_audit(
            self._audit_log,
            AuditRecord.create(
                workspace_id=workspace_id,
                actor_user_id=actor_user_id,
                action="social_account.connected",
                entity_type="social_account",
                entity_id=account.id,
                details={"provider": provider.value, "display_name": account.display_name},
            ),
        )
        return account
