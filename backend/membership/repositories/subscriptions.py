"""
Subscription Repository

Read-only view of the billing subscriptions mirrored for each workspace.
"""

from typing import List

from membership.core.constants import SUBSCRIPTIONS_COLLECTION
from membership.models.subscription import Subscription
from membership.repositories.base import BaseRepository


class SubscriptionRepository(BaseRepository[Subscription]):
    collection_name = SUBSCRIPTIONS_COLLECTION
    model_class = Subscription

    async def find_by_reference_id(self, reference_id: str) -> List[Subscription]:
        """All subscriptions referencing a workspace public id."""
        return await self.find_many({"reference_id": reference_id})
