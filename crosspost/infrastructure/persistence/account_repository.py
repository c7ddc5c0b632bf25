from collections.abc import Sequence
from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...application.ports.outbound import AccountRepository, CredentialRepository
from ...domain.entities import AccountStatus, ConnectedAccount, Credential
from ...domain.errors import PersistenceError
from ...domain.value_objects import ProviderName
from .models import OAuthTokenModel, SocialAccountModel, _naive_utc

logger = structlog.get_logger()


class SqlAlchemyAccountRepository(AccountRepository):
    """SQLAlchemy implementation of AccountRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _find_model(
        self, workspace_id: UUID, provider: ProviderName, provider_account_id: str
    ) -> SocialAccountModel | None:
        stmt = select(SocialAccountModel).where(
            SocialAccountModel.workspace_id == workspace_id,
            SocialAccountModel.platform == provider.value,
            SocialAccountModel.platform_user_id == provider_account_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(self, account: ConnectedAccount) -> ConnectedAccount:
        """Insert, or update the row with the same external identity."""
        existing = await self._find_model(
            account.workspace_id, account.provider, account.provider_account_id
        )
        if existing:
            existing.apply(account)
            model = existing
        else:
            model = SocialAccountModel.from_entity(account)
            self._session.add(model)

        try:
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error("Account upsert failed", provider=account.provider.value, error=str(e))
            raise PersistenceError("database_error", "Failed to save account") from e
        return model.to_entity()

    async def find_by_identity(
        self, workspace_id: UUID, provider: ProviderName, provider_account_id: str
    ) -> ConnectedAccount | None:
        model = await self._find_model(workspace_id, provider, provider_account_id)
        return model.to_entity() if model else None

    async def get_connected(
        self, workspace_id: UUID, account_ids: Sequence[UUID]
    ) -> list[ConnectedAccount]:
        """Connected accounts of the workspace among account_ids."""
        if not account_ids:
            return []
        stmt = select(SocialAccountModel).where(
            SocialAccountModel.workspace_id == workspace_id,
            SocialAccountModel.id.in_(list(account_ids)),
            SocialAccountModel.status == AccountStatus.CONNECTED.value,
        )
        result = await self._session.execute(stmt)
        return [model.to_entity() for model in result.scalars()]

    async def delete(self, account_id: UUID, workspace_id: UUID) -> bool:
        stmt = select(SocialAccountModel.id).where(
            SocialAccountModel.id == account_id,
            SocialAccountModel.workspace_id == workspace_id,
        )
        if (await self._session.execute(stmt)).scalar_one_or_none() is None:
            return False

        # Explicit token delete keeps the cascade on engines without FK enforcement
        await self._session.execute(
            delete(OAuthTokenModel).where(OAuthTokenModel.social_account_id == account_id)
        )
        await self._session.execute(
            delete(SocialAccountModel).where(SocialAccountModel.id == account_id)
        )
        return True


class SqlAlchemyCredentialRepository(CredentialRepository):
    """SQLAlchemy implementation of CredentialRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(self, credential: Credential) -> None:
        stmt = select(OAuthTokenModel).where(
            OAuthTokenModel.social_account_id == credential.account_id
        )
        model = (await self._session.execute(stmt)).scalar_one_or_none()
        if model is None:
            model = OAuthTokenModel(
                social_account_id=credential.account_id,
                created_at=_naive_utc(datetime.now(UTC)),
            )
            self._session.add(model)
        model.apply(credential)

        try:
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error("Credential upsert failed", error=str(e))
            raise PersistenceError("database_error", "Failed to save credential") from e

    async def get_for_accounts(self, account_ids: Sequence[UUID]) -> dict[UUID, Credential]:
        if not account_ids:
            return {}
        stmt = select(OAuthTokenModel).where(
            OAuthTokenModel.social_account_id.in_(list(account_ids))
        )
        result = await self._session.execute(stmt)
        return {model.social_account_id: model.to_entity() for model in result.scalars()}
