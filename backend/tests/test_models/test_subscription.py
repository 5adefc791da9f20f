"""Tests for subscription plan classification."""

from membership.models.subscription import Subscription, SubscriptionView


def _sub(plan, status="active", **fields):
    return Subscription(_id=f"{plan}-{status}", reference_id="ws", plan=plan, status=status, **fields)


class TestSubscriptionView:
    def test_empty_has_no_paid_plan(self):
        view = SubscriptionView()
        assert not view.has_paid_plan
        assert not view.seat_limited
        assert view.seat_subscription_id is None

    def test_active_team_is_seat_limited(self):
        view = SubscriptionView(subscriptions=[_sub("team", stripe_subscription_id="sub_1")])
        assert view.has_paid_plan
        assert view.seat_limited
        assert view.seat_subscription_id == "sub_1"

    def test_trialing_counts_as_active(self):
        view = SubscriptionView(subscriptions=[_sub("team", status="trialing")])
        assert view.team is not None

    def test_canceled_team_is_ignored(self):
        view = SubscriptionView(subscriptions=[_sub("team", status="canceled", stripe_subscription_id="sub_1")])
        assert view.team is None
        assert not view.has_paid_plan
        assert view.seat_subscription_id is None

    def test_pro_is_paid_but_not_seat_limited(self):
        view = SubscriptionView(subscriptions=[_sub("pro")])
        assert view.has_paid_plan
        assert view.pro is not None
        assert not view.seat_limited

    def test_unlimited_seats_lift_seat_limit(self):
        view = SubscriptionView(
            subscriptions=[_sub("team", stripe_subscription_id="sub_1", unlimited_seats=True)]
        )
        assert view.has_paid_plan
        assert not view.seat_limited
        assert view.seat_subscription_id is None

    def test_team_without_billing_handle(self):
        view = SubscriptionView(subscriptions=[_sub("team")])
        assert view.seat_limited
        assert view.seat_subscription_id is None
