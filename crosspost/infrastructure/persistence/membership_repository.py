from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...application.ports.outbound import WorkspaceMembershipRepository
from ...domain.entities import WorkspaceRole
from .models import WorkspaceMemberModel


class SqlAlchemyWorkspaceMembershipRepository(WorkspaceMembershipRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_role(self, workspace_id: UUID, user_id: str) -> WorkspaceRole | None:
        stmt = select(WorkspaceMemberModel.role).where(
            WorkspaceMemberModel.workspace_id == workspace_id,
            WorkspaceMemberModel.user_id == user_id,
        )
        role = (await self._session.execute(stmt)).scalar_one_or_none()
        return WorkspaceRole(role) if role else None
