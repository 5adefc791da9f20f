from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from membership.core.constants import ACTIVE_SUBSCRIPTION_STATUSES, PLAN_PRO, PLAN_TEAM
from membership.models.types import PyObjectId


class Subscription(BaseModel):
    """Billing subscription as mirrored from the billing provider."""

    model_config = ConfigDict(populate_by_name=True)

    id: PyObjectId = Field(alias="_id")
    reference_id: str  # workspace public id
    plan: str
    status: str
    stripe_subscription_id: Optional[str] = None
    unlimited_seats: bool = False

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_SUBSCRIPTION_STATUSES


class SubscriptionView(BaseModel):
    """A workspace's subscriptions, classified by plan."""

    subscriptions: List[Subscription] = []

    def active_by_plan(self, plan: str) -> Optional[Subscription]:
        for subscription in self.subscriptions:
            if subscription.plan == plan and subscription.is_active:
                return subscription
        return None

    @property
    def team(self) -> Optional[Subscription]:
        return self.active_by_plan(PLAN_TEAM)

    @property
    def pro(self) -> Optional[Subscription]:
        return self.active_by_plan(PLAN_PRO)

    @property
    def has_paid_plan(self) -> bool:
        return self.team is not None or self.pro is not None

    @property
    def has_unlimited_seats(self) -> bool:
        return any(s.unlimited_seats and s.is_active for s in self.subscriptions)

    @property
    def seat_limited(self) -> bool:
        return self.team is not None and not self.has_unlimited_seats

    @property
    def seat_subscription_id(self) -> Optional[str]:
        """Billing handle to adjust seats on, if seats are counted at all."""
        if not self.seat_limited:
            return None
        return self.team.stripe_subscription_id
