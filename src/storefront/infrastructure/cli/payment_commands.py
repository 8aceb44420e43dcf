"""CLI commands for the payment gateway handshake."""

from __future__ import annotations

import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import build_container


def _parse_fields(pairs: tuple[str, ...]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"Invalid field '{pair}'. Expected 'key=value'.")
        key, value = pair.split("=", 1)
        fields[key] = value
    return fields


@click.command("notify")
@click.option(
    "--field", "pairs", multiple=True, required=True,
    help="Notification field as key=value (repeatable, include signature).",
)
def payment_notify(pairs: tuple[str, ...]) -> None:
    """Apply a gateway notification by hand (e.g. a replayed webhook)."""
    try:
        order = build_container().apply_payment.handle(_parse_fields(pairs))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Notification applied: order {order.id} is {order.status.value}.")
