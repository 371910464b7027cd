"""Stripe plan model.

Local mirror of a plan in the Stripe catalog, kept for admin visibility.
plan_id is the Stripe plan ID and the sync key. data holds the raw
Stripe payload from the last sync (audit/debug only).
"""

from stripe_registration.extensions import db


class StripePlan(db.Model):
    __tablename__ = "stripe_plans"

    id = db.Column(db.Integer, primary_key=True)
    plan_id = db.Column(
        db.String(255), unique=True, nullable=False
    )  # e.g. "plan_HxYz..." / "price_1Abc..."
    name = db.Column(db.String(255), nullable=True)  # joined from the Stripe product
    livemode = db.Column(db.Boolean, default=False, nullable=False)
    data = db.Column(db.JSON, default=dict)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self):
        return f"<StripePlan {self.plan_id} ({self.name})>"
