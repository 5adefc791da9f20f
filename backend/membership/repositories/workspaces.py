"""
Workspace Repository

Read-only access to workspaces owned by the workspace service.
"""

from typing import Optional

from membership.core.constants import WORKSPACES_COLLECTION
from membership.models.workspace import Workspace
from membership.repositories.base import BaseRepository


class WorkspaceRepository(BaseRepository[Workspace]):
    collection_name = WORKSPACES_COLLECTION
    model_class = Workspace

    async def get_by_public_id(self, public_id: str) -> Optional[Workspace]:
        """Get a workspace that has not been deleted by its public id."""
        return await self.find_one({"public_id": public_id, "deleted_at": None})

    async def get_live_by_id(self, workspace_id: str) -> Optional[Workspace]:
        """Get a workspace that has not been deleted by its internal id."""
        return await self.find_one({"_id": workspace_id, "deleted_at": None})
