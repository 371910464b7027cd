"""Identity resolver — local user <-> Stripe customer mapping.

The link lives on users.stripe_customer_id. A user has at most one
customer. Nothing here stops two users from storing the same customer ID;
lookups return the first match by user id.
"""

import logging

from stripe_registration.models.user import User

logger = logging.getLogger(__name__)

# user_id stored on subscriptions whose customer has no local user.
ANONYMOUS_UID = 0


class IdentityResolver:

    def __init__(self, repository):
        self.repository = repository

    def get_user_by_customer_id(self, customer_id):
        """Return the User linked to a Stripe customer, or None."""
        if not customer_id:
            return None
        users = self.repository.load_by_properties(
            User, stripe_customer_id=customer_id
        )
        return users[0] if users else None

    def get_local_user_id(self, customer_id):
        """Like get_user_by_customer_id, but returns ANONYMOUS_UID when unlinked."""
        user = self.get_user_by_customer_id(customer_id)
        return user.id if user else ANONYMOUS_UID

    def get_customer_id(self, user):
        return user.stripe_customer_id or ""

    def set_local_user_customer_id(self, uid, customer_id):
        """Link user uid to a Stripe customer, replacing any previous link.

        Raises LookupError if the user doesn't exist.
        """
        user = self.repository.load(User, uid)
        if user is None:
            raise LookupError(f"No local user with id {uid}.")

        user.stripe_customer_id = customer_id
        self.repository.save(user)
        logger.info(f"Linked user {uid} to Stripe customer {customer_id}")
        return user
