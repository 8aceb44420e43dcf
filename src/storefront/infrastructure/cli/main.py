import logging

import click

from storefront.infrastructure.cli.order_commands import (
    order_create,
    order_list,
    order_show,
    order_status,
)
from storefront.infrastructure.cli.payment_commands import payment_notify
from storefront.infrastructure.cli.stats_commands import stats


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log engine activity to stderr.")
def cli(verbose: bool) -> None:
    """Storefront — order fulfillment and payment reconciliation"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def payment() -> None:
    """Payment gateway operations."""


@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
def serve(host: str, port: int) -> None:
    """Start the HTTP API."""
    import uvicorn

    from storefront.infrastructure.web.api import create_app

    click.echo(f"API docs: http://{host}:{port}/docs")
    uvicorn.run(create_app(), host=host, port=port)


# Register subcommands
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_show)
order.add_command(order_status)
payment.add_command(payment_notify)
cli.add_command(stats)
