"""Service wiring.

Builds the sync services with one shared gateway and repository per call.
Imports are lazy: models import the gateway helpers from this package.
"""


def build_identity_resolver(repository=None):
    from stripe_registration.services.identity_service import IdentityResolver
    from stripe_registration.services.repository import Repository

    return IdentityResolver(repository or Repository())


def build_plan_synchronizer(app_config, gateway=None, repository=None, notify=None):
    from stripe_registration.services.notification_service import notify as _notify
    from stripe_registration.services.plan_sync_service import PlanSynchronizer
    from stripe_registration.services.repository import Repository
    from stripe_registration.services.stripe_gateway import StripeGateway

    plan_list_url = f"{app_config['APP_BASE_URL']}{app_config['STRIPE_PLAN_LIST_PATH']}"
    return PlanSynchronizer(
        gateway=gateway or StripeGateway.from_app_config(app_config),
        repository=repository or Repository(),
        notify=notify or _notify,
        plan_list_url=plan_list_url,
    )


def build_subscription_synchronizer(app_config, gateway=None, repository=None, notify=None):
    from stripe_registration.services.notification_service import notify as _notify
    from stripe_registration.services.repository import Repository
    from stripe_registration.services.stripe_gateway import StripeGateway
    from stripe_registration.services.subscription_service import SubscriptionSynchronizer

    repository = repository or Repository()
    return SubscriptionSynchronizer(
        gateway=gateway or StripeGateway.from_app_config(app_config),
        repository=repository,
        identity=build_identity_resolver(repository),
        notify=notify or _notify,
    )
