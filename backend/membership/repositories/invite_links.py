"""
Invite Link Repository

Owns the ``workspace_invite_links`` collection.
"""

from datetime import datetime
from typing import List, Optional

from pymongo import ReturnDocument

from membership.core.constants import INVITE_LINKS_COLLECTION
from membership.models.invite_link import InviteLink
from membership.repositories.base import BaseRepository


class InviteLinkRepository(BaseRepository[InviteLink]):
    collection_name = INVITE_LINKS_COLLECTION
    model_class = InviteLink

    async def get_by_code(self, invite_code: str) -> Optional[InviteLink]:
        return await self.find_one({"invite_code": invite_code})

    async def find_unused_by_workspace(
        self, workspace_id: str, limit: int = 500
    ) -> List[InviteLink]:
        """Unused links of a workspace, newest first. Expiry is not filtered here."""
        return await self.find_many(
            {"workspace_id": workspace_id, "is_used": False},
            limit=limit,
            sort_by="created_at",
            sort_order=-1,
        )

    async def claim(self, link_id: str, user_id: str, now: datetime) -> Optional[InviteLink]:
        """
        Atomically mark a link used by ``user_id``.

        Only matches while the link is unused and not expired at ``now``, so
        of two concurrent redemptions exactly one gets the link back.

        Returns:
            The updated link, or None if the link was not redeemable
        """
        data = await self.collection.find_one_and_update(
            {"_id": link_id, "is_used": False, "expires_at": {"$gte": now}},
            {"$set": {"is_used": True, "used_at": now, "used_by": user_id}},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(data)

    async def release(self, link_id: str, user_id: str) -> bool:
        """Undo a claim made by ``user_id`` whose membership could not be created."""
        result = await self.collection.update_one(
            {"_id": link_id, "is_used": True, "used_by": user_id},
            {"$set": {"is_used": False, "used_at": None, "used_by": None}},
        )
        return result.modified_count > 0
