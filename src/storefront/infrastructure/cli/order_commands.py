"""CLI commands for orders."""

from __future__ import annotations

import click

from storefront.application.dto import CheckoutRequest, LineItemSpec, OrderDTO, Requester
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import build_container

# The CLI is an operator tool; it acts with admin rights.
CLI_ADMIN = Requester(user_id="cli", is_admin=True)


def _parse_items(raw: str) -> list[LineItemSpec]:
    """Parse 'p1:3,p2:5' into LineItemSpec list."""
    specs: list[LineItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        specs.append(LineItemSpec(product_id=product_id.strip(), quantity=qty))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.id}  (status={dto.status}, payment={dto.payment_method})")
    click.echo(f"Contact:  {dto.email}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.tracking_id:
        click.echo(f"Tracking: {dto.tracking_id}")
    if dto.delivered_at:
        click.echo(f"Delivered: {dto.delivered_at}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in dto.items:
        click.echo(
            f"  {item.name:<20} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Subtotal':<27} {dto.subtotal:>20}")
    click.echo(f"  {'Shipping':<27} {dto.shipping_cost:>20}")
    click.echo(f"  {'Discount':<27} {dto.discount:>20}")
    click.echo(f"  {'Order Total':<27} {dto.total_amount:>20}")
    if dto.redirect_url:
        click.echo()
        click.echo(f"Pay at: {dto.redirect_url}")


@click.command("create")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@click.option("--name", required=True, help="Customer full name.")
@click.option("--email", required=True, help="Contact email.")
@click.option("--phone", required=True, help="Contact phone.")
@click.option("--address", required=True, help="Street address.")
@click.option("--city", default="", help="City.")
@click.option("--postal-code", default="", help="Postal code.")
@click.option("--country", default="", help="Country.")
@click.option("--payment-method", default="COD", show_default=True, help="COD or PayFast.")
@click.option("--coupon", "coupon_code", default=None, help="Coupon code.")
@click.option("--subtotal", required=True, help="Declared subtotal.")
@click.option("--shipping", "shipping_cost", required=True, help="Declared shipping cost.")
@click.option("--discount", default="0", show_default=True, help="Declared discount.")
@click.option("--total", "total_amount", required=True, help="Declared total amount.")
@click.option("--user", "user_id", default=None, help="Owning user id (omit for guest).")
def order_create(items: str, user_id: str | None, **fields) -> None:
    """Create a new order (decrements stock)."""
    request = CheckoutRequest(items=_parse_items(items), **fields)

    try:
        dto = build_container().create_order.handle(request, user_id=user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.id} created  (status={dto.status})")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
def order_show(order_id: str) -> None:
    """Show details of an existing order."""
    try:
        dto = build_container().show_order.handle(CLI_ADMIN, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--page", default=1, show_default=True, type=int)
@click.option("--limit", default=20, show_default=True, type=int)
@click.option("--status", default=None, help="Only orders in this status.")
def order_list(page: int, limit: int, status: str | None) -> None:
    """List orders, newest first."""
    try:
        result = build_container().list_orders.handle(CLI_ADMIN, page, limit, status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<34} {'Status':<12} {'Total':>10}  Created")
    click.echo("-" * 80)
    for dto in result.orders:
        click.echo(f"{dto.id:<34} {dto.status:<12} {dto.total_amount:>10}  {dto.created_at}")
    click.echo(f"Page {result.current_page} of {result.total_pages}")


@click.command("status")
@click.option("--id", "order_id", required=True, help="Order ID to update.")
@click.option("--status", required=True, help="Target status, e.g. Shipped.")
@click.option("--tracking-id", default=None, help="Courier tracking id.")
def order_status(order_id: str, status: str, tracking_id: str | None) -> None:
    """Move an order to a new status (runs restock / notifications)."""
    try:
        dto = build_container().update_status.handle(
            CLI_ADMIN, order_id, status, tracking_id=tracking_id
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {order_id} is now {dto.status}.")
