import os
import logging

import click
from flask import Flask

from stripe_registration.config import config_by_name
from stripe_registration.extensions import db, migrate, login_manager


def create_app(config_name=None):
    """Application factory."""

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # --- Validate required env vars (skip in testing) ---
    if config_name != "testing":
        try:
            config_by_name[config_name].validate()
        except RuntimeError as e:
            app.logger.warning(f"Config validation: {e}")

    # --- Init extensions ---
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # --- Import models so Alembic can discover them ---
    with app.app_context():
        from stripe_registration import models  # noqa: F401

    # --- CLI commands ---
    register_cli(app)

    # --- Logging ---
    if not app.debug:
        logging.basicConfig(level=logging.INFO)

    return app


def register_cli(app):
    """Register the sync CLI commands with the Flask app."""
    from stripe_registration.services import (
        build_identity_resolver,
        build_plan_synchronizer,
        build_subscription_synchronizer,
    )
    from stripe_registration.services.subscription_service import LocalSubscriptionNotFound

    @app.cli.command("sync-plans")
    @click.option("--delete", is_flag=True,
                  help="Also delete local plans that are no longer active in Stripe.")
    def sync_plans(delete):
        """Synchronize the active Stripe plan catalog into local plans.

        Usage:
            flask sync-plans
            flask sync-plans --delete
        """
        result = build_plan_synchronizer(app.config).sync_plans(delete=delete)
        click.echo(
            f"  created={len(result.created)} updated={len(result.updated)} "
            f"deleted={len(result.deleted)}"
        )

    @app.cli.command("import-subscription")
    @click.argument("remote_id")
    def import_subscription(remote_id):
        """Fetch a Stripe subscription and create its local record."""
        service = build_subscription_synchronizer(app.config)
        subscription = service.create_local_subscription(
            service.gateway.fetch_subscription(remote_id)
        )
        click.echo(
            f"Local subscription {subscription.id}: {subscription.subscription_id} "
            f"user={subscription.user_id} status={subscription.status}"
        )

    @app.cli.command("sync-subscription")
    @click.argument("remote_id")
    def sync_subscription(remote_id):
        """Pull the current Stripe state of a subscription onto its local record."""
        service = build_subscription_synchronizer(app.config)
        try:
            subscription = service.sync_remote_subscription_to_local(remote_id)
        except LocalSubscriptionNotFound as e:
            raise click.ClickException(str(e))
        click.echo(f"{subscription.subscription_id}: status={subscription.status}")

    @app.cli.command("cancel-subscription")
    @click.argument("remote_id")
    def cancel_subscription(remote_id):
        """Schedule a Stripe subscription to cancel at period end."""
        if not build_subscription_synchronizer(app.config).cancel_remote_subscription(remote_id):
            click.echo(f"{remote_id} was already cancelled.")

    @app.cli.command("reactivate-subscription")
    @click.argument("remote_id")
    def reactivate_subscription(remote_id):
        """Undo a scheduled cancellation on a Stripe subscription."""
        build_subscription_synchronizer(app.config).reactivate_remote_subscription(remote_id)

    @app.cli.command("link-customer")
    @click.argument("uid", type=int)
    @click.argument("customer_id")
    def link_customer(uid, customer_id):
        """Store CUSTOMER_ID as the Stripe customer of local user UID."""
        try:
            user = build_identity_resolver().set_local_user_customer_id(uid, customer_id)
        except LookupError as e:
            raise click.ClickException(str(e))
        click.echo(f"Linked {user.email} to {customer_id}")
