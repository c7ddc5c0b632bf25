from .account_repository import SqlAlchemyAccountRepository, SqlAlchemyCredentialRepository
from .audit_repository import SqlAlchemyAuditLog
from .database import Database
from .membership_repository import SqlAlchemyWorkspaceMembershipRepository
from .models import (
    AuditLogModel,
    Base,
    OAuthTokenModel,
    SocialAccountModel,
    WorkspaceMemberModel,
)
from .unit_of_work import SqlAlchemyUnitOfWork

__all__ = [
    "AuditLogModel",
    "Base",
    "Database",
    "OAuthTokenModel",
    "SocialAccountModel",
    "SqlAlchemyAccountRepository",
    "SqlAlchemyAuditLog",
    "SqlAlchemyCredentialRepository",
    "SqlAlchemyUnitOfWork",
    "SqlAlchemyWorkspaceMembershipRepository",
    "WorkspaceMemberModel",
]
