"""
Member Repository

Owns the ``members`` collection. State changes are conditional updates: the
filter carries the precondition and a ``False`` return means no document
matched it.
"""

from datetime import datetime
from typing import List, Optional

from membership.core.constants import (
    MEMBER_STATUS_ACTIVE,
    MEMBER_STATUS_INVITED,
    MEMBERS_COLLECTION,
)
from membership.models.member import Member, normalize_email
from membership.repositories.base import BaseRepository

NOT_DELETED = {"deleted_at": None}


class MemberRepository(BaseRepository[Member]):
    collection_name = MEMBERS_COLLECTION
    model_class = Member

    async def get_by_public_id(self, public_id: str) -> Optional[Member]:
        """Get member by public id, including soft-deleted rows."""
        return await self.find_one({"public_id": public_id})

    async def get_by_email(self, workspace_id: str, email: str) -> Optional[Member]:
        """Get the non-deleted member holding an email in a workspace."""
        return await self.find_one(
            {"workspace_id": workspace_id, "email": normalize_email(email), **NOT_DELETED}
        )

    async def get_by_user(self, workspace_id: str, user_id: str) -> Optional[Member]:
        """Get the non-deleted member linked to an account in a workspace."""
        return await self.find_one(
            {"workspace_id": workspace_id, "user_id": user_id, **NOT_DELETED}
        )

    async def get_active_membership(self, workspace_id: str, user_id: str) -> Optional[Member]:
        """Get the active, non-deleted membership of an account."""
        return await self.find_one(
            {
                "workspace_id": workspace_id,
                "user_id": user_id,
                "status": MEMBER_STATUS_ACTIVE,
                **NOT_DELETED,
            }
        )

    async def find_by_workspace(self, workspace_id: str, limit: int = 1000) -> List[Member]:
        """List non-deleted members of a workspace, oldest first."""
        return await self.find_many(
            {"workspace_id": workspace_id, **NOT_DELETED},
            limit=limit,
            sort_by="created_at",
            sort_order=1,
        )

    async def soft_delete(self, member_id: str, deleted_by: str, deleted_at: datetime) -> bool:
        """Mark a member deleted. Only affects rows not already deleted."""
        result = await self.collection.update_one(
            {"_id": member_id, **NOT_DELETED},
            {"$set": {"deleted_at": deleted_at, "deleted_by": deleted_by}},
        )
        return result.modified_count > 0

    async def activate(self, member_id: str, user_id: str) -> bool:
        """Complete an email invite: invited -> active, linking the account."""
        result = await self.collection.update_one(
            {"_id": member_id, "status": MEMBER_STATUS_INVITED, **NOT_DELETED},
            {"$set": {"status": MEMBER_STATUS_ACTIVE, "user_id": user_id}},
        )
        return result.modified_count > 0
