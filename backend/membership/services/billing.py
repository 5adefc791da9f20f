"""
Seat Sync

Adjusts the seat quantity of a Stripe subscription. The Stripe SDK is
blocking, so calls run in a worker thread under a deadline. Nothing here is
transactional with the membership store; callers decide whether a failure
aborts their operation.
"""

import asyncio
import logging

import stripe

from membership.core.metrics import membership_seat_sync_total

logger = logging.getLogger(__name__)

# A subscription never drops below the seat held by its owner
MIN_SEATS = 1


class BillingError(Exception):
    """Raised when the billing provider could not apply a seat change."""


class SeatSync:
    def __init__(self, api_key: str, timeout_seconds: float = 20):
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    async def increment(self, subscription_id: str) -> int:
        return await self.adjust_seats(subscription_id, 1)

    async def decrement(self, subscription_id: str) -> int:
        return await self.adjust_seats(subscription_id, -1)

    async def adjust_seats(self, subscription_id: str, delta: int) -> int:
        """
        Change the seat quantity of a subscription by ``delta``.

        The worker thread cannot be cancelled, so a call that outlives the
        deadline is awaited until it settles. If it did apply the change, the
        opposite change is sent before the timeout is reported.

        Returns:
            The new seat quantity

        Raises:
            BillingError: Stripe is not configured, timed out, or rejected the change
        """
        direction = "increment" if delta > 0 else "decrement"
        if not self.api_key:
            membership_seat_sync_total.labels(direction=direction, outcome="error").inc()
            raise BillingError("Stripe is not configured")

        call = asyncio.ensure_future(
            asyncio.to_thread(self._adjust_seats_blocking, subscription_id, delta)
        )
        try:
            quantity = await asyncio.wait_for(asyncio.shield(call), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            membership_seat_sync_total.labels(direction=direction, outcome="error").inc()
            await self._undo_late_adjustment(call, subscription_id, delta)
            raise BillingError(
                f"Timed out updating seats of subscription {subscription_id}"
            )
        except stripe.StripeError as e:
            membership_seat_sync_total.labels(direction=direction, outcome="error").inc()
            raise BillingError(
                f"Stripe rejected seat update for subscription {subscription_id}: {e}"
            ) from e

        membership_seat_sync_total.labels(direction=direction, outcome="success").inc()
        logger.info(f"Subscription {subscription_id} seats adjusted by {delta:+d} to {quantity}")
        return quantity

    async def _undo_late_adjustment(self, call: "asyncio.Future[int]", subscription_id: str, delta: int) -> None:
        try:
            quantity = await call
        except (stripe.StripeError, BillingError) as e:
            logger.warning(f"Timed out seat update on {subscription_id} did not apply: {e}")
            return

        logger.warning(
            f"Seat update on {subscription_id} landed after the deadline ({quantity}); reverting {-delta:+d}"
        )
        try:
            await asyncio.to_thread(self._adjust_seats_blocking, subscription_id, -delta)
        except (stripe.StripeError, BillingError) as e:
            membership_seat_sync_total.labels(direction="revert", outcome="error").inc()
            logger.error(f"Failed to revert late seat update on {subscription_id}: {e}")

    def _adjust_seats_blocking(self, subscription_id: str, delta: int) -> int:
        subscription = stripe.Subscription.retrieve(subscription_id, api_key=self.api_key)
        items = subscription["items"]["data"]
        if not items:
            raise BillingError(f"Subscription {subscription_id} has no seat item")

        item = items[0]
        quantity = max((item.get("quantity") or 0) + delta, MIN_SEATS)
        stripe.Subscription.modify(
            subscription_id,
            items=[{"id": item["id"], "quantity": quantity}],
            proration_behavior="create_prorations",
            api_key=self.api_key,
        )
        return quantity
