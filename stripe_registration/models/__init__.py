# Models package — import all models here so Alembic can discover them.

from stripe_registration.models.user import User  # noqa: F401
from stripe_registration.models.plan import StripePlan  # noqa: F401
from stripe_registration.models.subscription import StripeSubscription  # noqa: F401
