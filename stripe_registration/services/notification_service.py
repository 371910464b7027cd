"""User-facing notifications.

Inside a request the message is flashed (shown on the next page render);
from the CLI it is echoed to the terminal.
"""

import click
from flask import flash, has_request_context


def notify(message, category="status"):
    """Send a human-readable message to whoever triggered the operation."""
    if has_request_context():
        flash(message, category)
    else:
        click.echo(message)
