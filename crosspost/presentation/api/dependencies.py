from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...application.services import (
    ConnectionService,
    OAuthClient,
    PublishDispatcher,
    WorkspaceAccessService,
)
from ...config import settings
from ...domain.value_objects import ProviderName
from ...infrastructure.oauth_state import OAuthStateSigner
from ...infrastructure.persistence import (
    Database,
    SqlAlchemyAccountRepository,
    SqlAlchemyAuditLog,
    SqlAlchemyCredentialRepository,
    SqlAlchemyUnitOfWork,
    SqlAlchemyWorkspaceMembershipRepository,
)
from ...providers import ProviderAdapterRegistry

# Process-wide singletons
_database: Database | None = None
_registry: ProviderAdapterRegistry | None = None


def get_database() -> Database:
    global _database
    if _database is None:
        _database = Database(settings.database_url, pool_size=settings.db_pool_size)
    return _database


def get_adapter_registry() -> ProviderAdapterRegistry:
    global _registry
    if _registry is None:
        _registry = ProviderAdapterRegistry(
            timeout=settings.http_timeout_seconds,
            bluesky_service_url=settings.bluesky_service_url,
        )
    return _registry


def get_state_signer() -> OAuthStateSigner:
    return OAuthStateSigner(settings.secret_key, settings.oauth_state_ttl_seconds)


def oauth_client_for(provider: ProviderName) -> OAuthClient:
    client_id, client_secret = settings.oauth_client(provider.value)
    return OAuthClient(
        client_id=client_id,
        client_secret=client_secret,
        redirect_uri=settings.redirect_uri(provider.value),
    )


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    db = get_database()
    session = db.session()
    try:
        yield session
    finally:
        await session.close()


async def get_connection_service(
    session: AsyncSession = Depends(get_session),
    registry: ProviderAdapterRegistry = Depends(get_adapter_registry),
    signer: OAuthStateSigner = Depends(get_state_signer),
) -> ConnectionService:
    return ConnectionService(
        accounts=SqlAlchemyAccountRepository(session),
        credentials=SqlAlchemyCredentialRepository(session),
        uow=SqlAlchemyUnitOfWork(session),
        access=WorkspaceAccessService(SqlAlchemyWorkspaceMembershipRepository(session)),
        adapters=registry,
        signer=signer,
        clients=oauth_client_for,
        audit_log=SqlAlchemyAuditLog(session),
    )


async def get_publish_dispatcher(
    session: AsyncSession = Depends(get_session),
    registry: ProviderAdapterRegistry = Depends(get_adapter_registry),
) -> PublishDispatcher:
    return PublishDispatcher(
        accounts=SqlAlchemyAccountRepository(session),
        credentials=SqlAlchemyCredentialRepository(session),
        access=WorkspaceAccessService(SqlAlchemyWorkspaceMembershipRepository(session)),
        adapters=registry,
        audit_log=SqlAlchemyAuditLog(session),
        concurrency=settings.publish_concurrency,
        timeout_seconds=settings.publish_timeout_seconds,
        report_unresolved_targets=settings.report_unresolved_targets,
    )
