"""User model.

Local user record. Carries the link to the payment provider's customer
(stripe_customer_id). Flask-Login integration via UserMixin so a host
application can use it as its session user.
"""

from flask_login import UserMixin

from stripe_registration.extensions import db


class User(UserMixin, db.Model):
    __tablename__ = "users"

    # Integer ids: 0 is reserved for "no local user" on subscriptions.
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    full_name = db.Column(db.String(255))
    is_admin = db.Column(db.Boolean, default=False)
    # Not unique: two users claiming the same customer is not prevented here.
    stripe_customer_id = db.Column(db.String(255), nullable=True, index=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self):
        return f"<User {self.email}>"
