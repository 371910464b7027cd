"""Tests for the flask CLI commands.

Covers:
- sync-plans (with and without --delete)
- import-subscription / sync-subscription
- cancel-subscription on an already canceled subscription
- reactivate-subscription
- link-customer
"""

from unittest.mock import patch

from stripe_registration.extensions import db
from stripe_registration.models.plan import StripePlan
from stripe_registration.models.subscription import StripeSubscription
from stripe_registration.models.user import User


class TestCli:

    @patch("stripe_registration.services.stripe_gateway.stripe")
    def test_sync_plans_delete(self, mock_stripe, app, make_plan, make_product):
        db.session.add(StripePlan(plan_id="plan_old", name="Old", livemode=False, data={}))
        db.session.commit()
        mock_stripe.Plan.list.return_value.auto_paging_iter.return_value = [make_plan("plan_A")]
        mock_stripe.Product.retrieve.return_value = make_product()

        result = app.test_cli_runner().invoke(args=["sync-plans", "--delete"])

        assert result.exit_code == 0, result.output
        assert "Stripe plans were synchronized" in result.output
        assert "created=1 updated=0 deleted=1" in result.output
        assert {p.plan_id for p in StripePlan.query.all()} == {"plan_A"}

    @patch("stripe_registration.services.stripe_gateway.stripe")
    def test_sync_plans_keeps_stale_by_default(self, mock_stripe, app, make_plan,
                                               make_product):
        db.session.add(StripePlan(plan_id="plan_old", name="Old", livemode=False, data={}))
        db.session.commit()
        mock_stripe.Plan.list.return_value.auto_paging_iter.return_value = [make_plan("plan_A")]
        mock_stripe.Product.retrieve.return_value = make_product()

        result = app.test_cli_runner().invoke(args=["sync-plans"])

        assert result.exit_code == 0, result.output
        assert StripePlan.query.count() == 2

    @patch("stripe_registration.services.stripe_gateway.stripe")
    def test_import_then_sync_subscription(self, mock_stripe, app, seed_data,
                                           make_subscription):
        runner = app.test_cli_runner()
        mock_stripe.Subscription.retrieve.return_value = make_subscription()

        result = runner.invoke(args=["import-subscription", "sub_1"])
        assert result.exit_code == 0, result.output
        assert StripeSubscription.query.first().user_id == seed_data["alice_id"]

        mock_stripe.Subscription.retrieve.return_value = make_subscription(status="canceled")
        result = runner.invoke(args=["sync-subscription", "sub_1"])
        assert result.exit_code == 0, result.output
        assert "status=canceled" in result.output
        assert StripeSubscription.query.first().status == "canceled"

    @patch("stripe_registration.services.stripe_gateway.stripe")
    def test_sync_subscription_missing(self, mock_stripe, app, make_subscription):
        mock_stripe.Subscription.retrieve.return_value = make_subscription(sub_id="sub_missing")

        result = app.test_cli_runner().invoke(args=["sync-subscription", "sub_missing"])

        assert result.exit_code == 1
        assert "Could not find matching local subscription" in result.output

    @patch("stripe_registration.services.stripe_gateway.stripe")
    def test_cancel_already_canceled(self, mock_stripe, app, make_subscription):
        mock_stripe.Subscription.retrieve.return_value = make_subscription(status="canceled")

        result = app.test_cli_runner().invoke(args=["cancel-subscription", "sub_1"])

        assert result.exit_code == 0, result.output
        assert "already cancelled" in result.output
        mock_stripe.Subscription.modify.assert_not_called()

    @patch("stripe_registration.services.stripe_gateway.stripe")
    def test_reactivate(self, mock_stripe, app, make_subscription):
        mock_stripe.Subscription.retrieve.return_value = make_subscription(cancel_at_period_end=True)

        result = app.test_cli_runner().invoke(args=["reactivate-subscription", "sub_1"])

        assert result.exit_code == 0, result.output
        assert "Subscription re-activated." in result.output
        mock_stripe.Subscription.modify.assert_called_once()

    def test_link_customer(self, app, seed_data):
        result = app.test_cli_runner().invoke(
            args=["link-customer", str(seed_data["bob_id"]), "cus_bob"]
        )

        assert result.exit_code == 0, result.output
        assert db.session.get(User, seed_data["bob_id"]).stripe_customer_id == "cus_bob"

    def test_link_customer_unknown_user(self, app, seed_data):
        result = app.test_cli_runner().invoke(args=["link-customer", "9999", "cus_x"])

        assert result.exit_code == 1
        assert "No local user with id 9999" in result.output
