from datetime import UTC, datetime
from typing import Any, overload
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ...domain.entities import (
    AccountStatus,
    AccountType,
    AuditRecord,
    ConnectedAccount,
    Credential,
)
from ...domain.value_objects import ProviderName


def _naive_utc(dt: datetime | None) -> datetime | None:
    """Strip timezone info for storage in TIMESTAMP WITHOUT TIME ZONE columns."""
    if dt is None:
        return None
    return dt.astimezone(UTC).replace(tzinfo=None)


@overload
def _aware_utc(dt: datetime) -> datetime: ...


@overload
def _aware_utc(dt: None) -> None: ...


@overload
def _aware_utc(dt: datetime | None) -> datetime | None: ...


def _aware_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC timezone to naive datetimes read from the database."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


class Base(DeclarativeBase):
    pass


class SocialAccountModel(Base):
    """SQLAlchemy model for ConnectedAccount."""

    __tablename__ = "social_accounts"
    __table_args__ = (
        UniqueConstraint(
            "workspace_id", "platform", "platform_user_id", name="uq_social_accounts_identity"
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    workspace_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    platform: Mapped[str] = mapped_column(String(50), nullable=False)
    platform_user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    handle: Mapped[str | None] = mapped_column(String(255))
    avatar_url: Mapped[str | None] = mapped_column(String(2048))
    account_type: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    autopublish_capable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_connected_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    @classmethod
    def from_entity(cls, account: ConnectedAccount) -> "SocialAccountModel":
        """Convert domain entity to ORM model."""
        model = cls(id=account.id, created_at=_naive_utc(account.created_at))
        model.apply(account)
        return model

    def apply(self, account: ConnectedAccount) -> None:
        """Copy the mutable fields of an entity onto this row."""
        self.workspace_id = account.workspace_id
        self.platform = account.provider.value
        self.platform_user_id = account.provider_account_id
        self.display_name = account.display_name
        self.handle = account.handle
        self.avatar_url = account.avatar_url
        self.account_type = account.account_type.value
        self.status = account.status.value
        self.autopublish_capable = account.autopublish_capable
        self.last_connected_at = _naive_utc(account.last_connected_at)
        self.updated_at = _naive_utc(account.updated_at)

    def to_entity(self) -> ConnectedAccount:
        """Convert ORM model to domain entity."""
        return ConnectedAccount(
            id=self.id,
            workspace_id=self.workspace_id,
            provider=ProviderName(self.platform),
            provider_account_id=self.platform_user_id,
            display_name=self.display_name,
            account_type=AccountType(self.account_type),
            status=AccountStatus(self.status),
            last_connected_at=_aware_utc(self.last_connected_at),
            created_at=_aware_utc(self.created_at),
            updated_at=_aware_utc(self.updated_at),
            handle=self.handle,
            avatar_url=self.avatar_url,
            autopublish_capable=self.autopublish_capable,
        )


class OAuthTokenModel(Base):
    """SQLAlchemy model for Credential. One row per social account."""

    __tablename__ = "oauth_tokens"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    social_account_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("social_accounts.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[str | None] = mapped_column(Text)
    token_type: Mapped[str] = mapped_column(String(50), nullable=False, default="Bearer")
    scope: Mapped[str | None] = mapped_column(Text)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def apply(self, credential: Credential) -> None:
        self.access_token = credential.access_token
        self.refresh_token = credential.refresh_token
        self.token_type = credential.token_type
        self.scope = credential.scope
        self.expires_at = _naive_utc(credential.expires_at)
        self.updated_at = _naive_utc(datetime.now(UTC))

    def to_entity(self) -> Credential:
        return Credential(
            account_id=self.social_account_id,
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expires_at=_aware_utc(self.expires_at),
            scope=self.scope,
            token_type=self.token_type,
        )


class AuditLogModel(Base):
    """Append-only audit trail."""

    __tablename__ = "audit_logs"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    workspace_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    actor_user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_id: Mapped[UUID | None] = mapped_column(Uuid)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    @classmethod
    def from_entity(cls, record: AuditRecord) -> "AuditLogModel":
        return cls(
            id=record.id,
            workspace_id=record.workspace_id,
            actor_user_id=record.actor_user_id,
            action=record.action,
            entity_type=record.entity_type,
            entity_id=record.entity_id,
            details=record.details,
            created_at=_naive_utc(record.created_at),
        )


class WorkspaceMemberModel(Base):
    """Workspace membership. Owned by the workspace service; read-only here."""

    __tablename__ = "workspace_members"

    workspace_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
