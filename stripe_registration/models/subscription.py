"""Stripe subscription model.

Local, annotated copy of a Stripe subscription. Stripe is the source of
truth; status mirrors the Stripe status string verbatim. Cancellation is
a status change, rows are never deleted by the sync code.

user_id is 0 when no local user has the subscription's customer linked
(orphaned until the link is made).
"""

from stripe_registration.extensions import db
from stripe_registration.services.stripe_gateway import (
    extract_period_end,
    extract_plan_id,
)


class StripeSubscription(db.Model):
    __tablename__ = "stripe_subscriptions"

    id = db.Column(db.Integer, primary_key=True)
    subscription_id = db.Column(
        db.String(255), unique=True, nullable=False
    )  # e.g. "sub_1Abc..."
    user_id = db.Column(db.Integer, nullable=False, default=0, index=True)
    plan_id = db.Column(db.String(255), nullable=True)
    customer_id = db.Column(db.String(255), nullable=True, index=True)
    status = db.Column(db.String(50), nullable=False)
    cancel_at_period_end = db.Column(db.Boolean, default=False)
    roles = db.Column(db.JSON, default=list)  # granted outside the sync core
    current_period_end = db.Column(
        db.DateTime(timezone=True), nullable=True
    )
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def update_from_upstream(self, remote):
        """Copy the Stripe subscription snapshot onto this record.

        Does not commit; the caller persists.
        """
        self.status = remote.get("status", self.status)
        self.customer_id = remote.get("customer") or self.customer_id
        self.cancel_at_period_end = bool(remote.get("cancel_at_period_end", False))

        plan_id = extract_plan_id(remote)
        if plan_id:
            self.plan_id = plan_id

        current_period_end = extract_period_end(remote)
        if current_period_end:
            self.current_period_end = current_period_end

    def __repr__(self):
        return f"<StripeSubscription {self.subscription_id} ({self.status})>"
