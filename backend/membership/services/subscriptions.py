"""
Subscription Query

Reads a workspace's billing subscriptions and classifies them by plan.
"""

import logging

from membership.models.subscription import SubscriptionView
from membership.repositories.subscriptions import SubscriptionRepository

logger = logging.getLogger(__name__)


class SubscriptionQuery:
    def __init__(self, repository: SubscriptionRepository):
        self.repository = repository

    async def get_view(self, workspace_public_id: str) -> SubscriptionView:
        subscriptions = await self.repository.find_by_reference_id(workspace_public_id)
        view = SubscriptionView(subscriptions=subscriptions)
        logger.debug(
            f"Workspace {workspace_public_id}: paid_plan={view.has_paid_plan} "
            f"seat_limited={view.seat_limited}"
        )
        return view
