"""Tests for the notification sink (flash in requests, echo on the CLI)."""

from unittest.mock import patch

from flask import get_flashed_messages

from stripe_registration.services.notification_service import notify


def test_flashes_inside_request(app):
    with app.test_request_context("/"):
        notify("Subscription re-activated.", "status")

        assert get_flashed_messages(with_categories=True) == [
            ("status", "Subscription re-activated.")
        ]


@patch("stripe_registration.services.notification_service.click.echo")
def test_echoes_outside_request(mock_echo, app):
    notify("Stripe plans were synchronized.")

    mock_echo.assert_called_once_with("Stripe plans were synchronized.")
