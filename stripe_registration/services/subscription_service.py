"""Subscription service — keeps stripe_subscriptions in line with Stripe.

Responsible for:
- Creating local subscription rows from Stripe subscriptions (one per
  Stripe subscription ID; a repeat create refreshes the existing row)
- Pulling the current Stripe state onto an existing local row
- Scheduling cancellation at period end / reactivating in Stripe
- Answering "does this user have a subscription?"

Status transitions happen in Stripe; this module only mirrors them:
    active --(cancel requested)--> active + cancel_at_period_end --> canceled
    canceled --(reactivate)--> active
"""

import logging

from stripe_registration.models.subscription import StripeSubscription
from stripe_registration.services.stripe_gateway import (
    as_dict,
    extract_first_item_id,
    extract_period_end,
    extract_plan_id,
)

logger = logging.getLogger(__name__)


class LocalSubscriptionNotFound(LookupError):
    """No stripe_subscriptions row for a Stripe subscription ID."""

    def __init__(self, remote_id):
        self.remote_id = remote_id
        super().__init__(
            f"Could not find matching local subscription for remote id {remote_id}."
        )


class SubscriptionSynchronizer:

    def __init__(self, gateway, repository, identity, notify):
        self.gateway = gateway
        self.repository = repository
        self.identity = identity
        self.notify = notify

    # ──────────────────────────────────────────────
    # Lookups
    # ──────────────────────────────────────────────

    def user_has_stripe_subscription(self, user, remote_id=None):
        """Check whether a user has a Stripe subscription.

        Without remote_id this only looks at the stored customer link
        (cheap, may be stale). With remote_id it checks for a local
        subscription row owned by the user. Stripe is not called either way.
        """
        if remote_id is None:
            return bool(self.identity.get_customer_id(user))

        subscription = self.load_local_subscription(
            subscription_id=remote_id, user_id=user.id
        )
        return subscription is not None

    def load_remote_subscription_by_user(self, user):
        """Stripe subscriptions for the user's customer, or None."""
        customer_id = self.identity.get_customer_id(user)
        if not customer_id:
            return None
        return self.load_remote_subscription_multiple(customer=customer_id)

    def load_remote_subscription_multiple(self, **filters):
        """Stripe subscriptions matching filters, or None if there are none."""
        return self.gateway.fetch_subscriptions(**filters)

    def load_local_subscription(self, **properties):
        """First local subscription matching properties, or None."""
        subscriptions = self.load_local_subscription_multiple(**properties)
        return subscriptions[0] if subscriptions else None

    def load_local_subscription_multiple(self, **properties):
        return self.repository.load_by_properties(StripeSubscription, **properties)

    # ──────────────────────────────────────────────
    # Local writes
    # ──────────────────────────────────────────────

    def create_local_subscription(self, remote):
        """Create the local row for a Stripe subscription.

        The owning user is whoever has the subscription's customer linked;
        user_id is 0 if nobody does. If a row for this subscription ID
        already exists it is refreshed from `remote` and returned instead.

        Returns the StripeSubscription.
        """
        remote = as_dict(remote)
        existing = self.load_local_subscription(subscription_id=remote["id"])
        if existing:
            existing.update_from_upstream(remote)
            self._resolve_orphan(existing)
            self.repository.save(existing)
            logger.info(
                f"Subscription {remote['id']} already exists locally, refreshed it."
            )
            return existing

        customer_id = remote.get("customer")
        uid = self.identity.get_local_user_id(customer_id)
        if not uid:
            logger.warning(
                f"No local user linked to customer {customer_id} "
                f"for subscription {remote['id']}"
            )

        subscription = self.repository.create(
            StripeSubscription,
            user_id=uid,
            plan_id=extract_plan_id(remote),
            subscription_id=remote["id"],
            customer_id=customer_id,
            status=remote.get("status"),
            cancel_at_period_end=bool(remote.get("cancel_at_period_end", False)),
            roles=[],
            current_period_end=extract_period_end(remote),
        )
        logger.info(f"Created {subscription.subscription_id} subscription.")
        return subscription

    def _resolve_orphan(self, subscription):
        """Give an orphaned row (user_id 0) to the user now linked to its customer."""
        if subscription.user_id:
            return
        uid = self.identity.get_local_user_id(subscription.customer_id)
        if uid:
            subscription.user_id = uid
            logger.info(
                f"Subscription {subscription.subscription_id} assigned to user {uid}."
            )

    def sync_remote_subscription_to_local(self, remote_id):
        """Copy the current Stripe state of remote_id onto its local row.

        Raises LocalSubscriptionNotFound if there is no local row (it has to
        be created first with create_local_subscription).
        Raises stripe.StripeError on API failures.
        """
        remote = self.gateway.fetch_subscription(remote_id)
        local = self.load_local_subscription(subscription_id=remote_id)
        if local is None:
            raise LocalSubscriptionNotFound(remote_id)

        local.update_from_upstream(remote)
        self._resolve_orphan(local)
        self.repository.save(local)
        logger.info(f"Updated subscription entity {local.id}.")
        return local

    # ──────────────────────────────────────────────
    # Remote writes
    # ──────────────────────────────────────────────

    def reactivate_remote_subscription(self, remote_id):
        """Undo a scheduled cancellation, keeping the same plan item."""
        subscription = self.gateway.fetch_subscription(remote_id)
        self.gateway.update_subscription(
            remote_id,
            cancel_at_period_end=False,
            items=[{
                "id": extract_first_item_id(subscription),
                "plan": extract_plan_id(subscription),
            }],
        )
        self.notify("Subscription re-activated.", "status")
        logger.info(f"Re-activated remote subscription {remote_id}.")

    def cancel_remote_subscription(self, remote_id):
        """Schedule cancellation at the end of the current period.

        No Stripe write if the subscription is already canceled.
        Returns True if Stripe was updated.
        """
        subscription = self.gateway.fetch_subscription(remote_id)
        if subscription.get("status") == "canceled":
            logger.info(f"Remote subscription {remote_id} was already cancelled.")
            return False

        self.gateway.update_subscription(remote_id, cancel_at_period_end=True)
        self.notify(
            "Subscription cancelled. It will not renew after the current pay period.",
            "status",
        )
        logger.info(f"Cancelled remote subscription {remote_id}.")
        return True
