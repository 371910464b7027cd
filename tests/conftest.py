"""Shared test fixtures for the Stripe sync test suite.

Provides:
- app: Flask app configured for testing (in-memory SQLite, fake Stripe key)
- db_session: clean database per test (tables created/dropped)
- seed_data: one user linked to a Stripe customer, one unlinked user
- notify: MagicMock standing in for the notification sink
- make_plan / make_subscription / make_product: real stripe objects built
  with construct_from(), the same types the SDK returns
"""

from unittest.mock import MagicMock

import pytest
import stripe

from stripe_registration import create_app
from stripe_registration.extensions import db as _db
from stripe_registration.models.user import User


@pytest.fixture(scope="session")
def app():
    """Create the Flask application configured for testing."""
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def db_session(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield _db.session
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def notify():
    return MagicMock()


@pytest.fixture
def seed_data(app, db_session):
    """Seed two users: alice (linked to cus_alice) and bob (no customer).

    Returns a dict of plain IDs so tests don't depend on session state.
    """
    alice = User(
        email="alice@example.com",
        full_name="Alice Linked",
        stripe_customer_id="cus_alice",
    )
    bob = User(email="bob@example.com", full_name="Bob Unlinked")
    _db.session.add_all([alice, bob])
    _db.session.commit()

    return {
        "alice_id": alice.id,
        "bob_id": bob.id,
        "alice_customer_id": "cus_alice",
    }


STRIPE_KEY = "sk_test_fake"


def _plan_object(plan_id, product="prod_basic", livemode=True, amount=1000):
    """stripe.Plan as returned by stripe.Plan.list()."""
    return stripe.Plan.construct_from({
        "id": plan_id,
        "object": "plan",
        "active": True,
        "amount": amount,
        "currency": "usd",
        "interval": "month",
        "livemode": livemode,
        "product": product,
    }, STRIPE_KEY)


def _product_object(product_id="prod_basic", name="Basic"):
    return stripe.Product.construct_from({
        "id": product_id,
        "object": "product",
        "name": name,
    }, STRIPE_KEY)


def _subscription_object(sub_id="sub_1", customer="cus_alice", status="active",
                         plan_id="plan_A", current_period_end=1798761600,
                         cancel_at_period_end=False, item_id="si_1"):
    """stripe.Subscription (older API shape, period end at top level)."""
    return stripe.Subscription.construct_from({
        "id": sub_id,
        "object": "subscription",
        "customer": customer,
        "status": status,
        "current_period_end": current_period_end,
        "cancel_at_period_end": cancel_at_period_end,
        "plan": {"id": plan_id, "object": "plan"},
        "items": {
            "object": "list",
            "data": [
                {
                    "id": item_id,
                    "object": "subscription_item",
                    "plan": {"id": plan_id, "object": "plan"},
                    "price": {"id": plan_id, "object": "price"},
                },
            ],
        },
    }, STRIPE_KEY)


@pytest.fixture
def make_plan():
    return _plan_object


@pytest.fixture
def make_product():
    return _product_object


@pytest.fixture
def make_subscription():
    return _subscription_object
