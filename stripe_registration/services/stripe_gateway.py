"""Stripe gateway — every call to the Stripe API goes through here.

Responsible for:
- Configuring the stripe SDK from app config
- Fetching plans, products and subscriptions
- Draining list endpoints across all pages (RemoteCollection)
- Updating subscriptions
- Converting every StripeObject to a plain dict before handing it out
- Helpers that read fields out of Stripe subscription payloads

Stripe errors (stripe.StripeError and subclasses) propagate to the caller
unchanged. The one exception is fetch_plan, which turns "resource_missing"
into None.
"""

import logging
from datetime import datetime, timezone

import stripe
from flask import current_app

logger = logging.getLogger(__name__)


def as_dict(stripe_object):
    """Plain-dict copy of a StripeObject (nested objects included).

    StripeObject is not a dict subclass in current SDKs, so nothing outside
    this module reads Stripe objects directly. Plain dicts pass through.
    """
    if hasattr(stripe_object, "to_dict"):
        return stripe_object.to_dict()
    return stripe_object


def extract_period_end(sub_data):
    """Extract current_period_end from a Stripe subscription object.

    In newer Stripe API versions, current_period_end has moved from the
    subscription top level to items.data[0].current_period_end.
    This helper checks both locations.

    Returns a timezone-aware datetime or None.
    """
    ts = sub_data.get("current_period_end")

    if not ts:
        item = _first_item(sub_data)
        if item:
            ts = item.get("current_period_end")

    if ts:
        return datetime.fromtimestamp(ts, tz=timezone.utc)
    return None


def extract_plan_id(sub_data):
    """Return the plan ID a Stripe subscription is on, or None.

    Single-item subscriptions carry a top-level `plan`; otherwise the
    first item's plan (or price) is used.
    """
    plan = sub_data.get("plan")
    if plan:
        return plan if isinstance(plan, str) else plan.get("id")

    item = _first_item(sub_data)
    if not item:
        return None
    for key in ("plan", "price"):
        value = item.get(key)
        if value:
            return value if isinstance(value, str) else value.get("id")
    return None


def extract_first_item_id(sub_data):
    """Return the ID of the first subscription item (si_...), or None."""
    item = _first_item(sub_data)
    return item.get("id") if item else None


def _first_item(sub_data):
    items = sub_data.get("items")
    if items and items.get("data"):
        return items["data"][0]
    return None


class RemoteCollection:
    """Every record of a Stripe list call, across all pages, as plain dicts.

    Lazy: nothing past the first page is fetched until iterated.
    Restartable: each iteration re-issues the list call and pages
    through it again with auto_paging_iter().
    """

    def __init__(self, lister, filters, first_page=None):
        self._lister = lister
        self._filters = dict(filters)
        self._first_page = first_page

    def __iter__(self):
        page = self._first_page
        self._first_page = None
        if page is None:
            page = self._lister(**self._filters)
        for record in page.auto_paging_iter():
            yield as_dict(record)

    def __repr__(self):
        return f"<RemoteCollection {getattr(self._lister, '__qualname__', self._lister)} {self._filters}>"


class StripeGateway:
    """Thin wrapper over the stripe SDK.

    Transport, auth, retries and pagination are the SDK's job; this class
    only picks the endpoints and shapes the results. Everything returned
    is a plain dict (see as_dict), never a StripeObject.
    """

    def __init__(self, api_key=None, api_version=None):
        self.api_key = api_key
        self.api_version = api_version

    @classmethod
    def from_app_config(cls, config=None):
        config = config if config is not None else current_app.config
        return cls(
            api_key=config["STRIPE_SECRET_KEY"],
            api_version=config.get("STRIPE_API_VERSION"),
        )

    def _configure(self):
        stripe.api_key = self.api_key
        if self.api_version:
            stripe.api_version = self.api_version

    # ── Subscriptions ──

    def fetch_subscriptions(self, **filters):
        """List subscriptions matching filters (e.g. customer="cus_...").

        Returns a RemoteCollection, or None if nothing matches.
        """
        self._configure()
        first_page = stripe.Subscription.list(**filters)
        if not first_page.data:
            return None
        return RemoteCollection(stripe.Subscription.list, filters, first_page=first_page)

    def fetch_subscription(self, remote_id):
        """Retrieve one subscription.

        Raises stripe.InvalidRequestError if it doesn't exist.
        """
        self._configure()
        return as_dict(stripe.Subscription.retrieve(remote_id))

    def update_subscription(self, remote_id, **patch):
        self._configure()
        logger.debug(f"Updating Stripe subscription {remote_id}: {patch}")
        return as_dict(stripe.Subscription.modify(remote_id, **patch))

    # ── Catalog ──

    def fetch_plans(self, **filters):
        """All plans matching filters (e.g. active=True), every page."""
        self._configure()
        return RemoteCollection(stripe.Plan.list, filters)

    def fetch_plan(self, plan_id, **params):
        """Retrieve one plan, or None if Stripe has no plan with that ID."""
        self._configure()
        try:
            return as_dict(stripe.Plan.retrieve(plan_id, **params))
        except stripe.InvalidRequestError as e:
            if e.code == "resource_missing":
                return None
            raise

    def fetch_product(self, product_id):
        self._configure()
        return as_dict(stripe.Product.retrieve(product_id))
