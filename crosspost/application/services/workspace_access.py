from collections.abc import Collection
from uuid import UUID

import structlog

from ...domain.entities import WorkspaceRole
from ...domain.errors import AuthorizationError
from ..ports.outbound import WorkspaceMembershipRepository

logger = structlog.get_logger()


class WorkspaceAccessService:
    """Checks a caller's role in a workspace."""

    def __init__(self, memberships: WorkspaceMembershipRepository) -> None:
        self._memberships = memberships

    async def require_role(
        self,
        workspace_id: UUID,
        user_id: str,
        allowed: Collection[WorkspaceRole],
    ) -> WorkspaceRole:
        """
        Return the caller's role if it is one of ``allowed``.

        Raises:
            AuthorizationError: If the caller is not a member or lacks the role
        """
        role = await self._memberships.get_role(workspace_id, user_id)
        if role is None or role not in allowed:
            logger.warning(
                "Workspace access denied",
                workspace_id=str(workspace_id),
                user_id=user_id,
                role=role.value if role else None,
            )
            raise AuthorizationError("forbidden", "You do not have access to this workspace")
        return role
