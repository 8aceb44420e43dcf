"""CLI command for sales reporting."""

from __future__ import annotations

from datetime import datetime

import click

from storefront.application.sales_stats import SalesWindow
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import build_container


@click.command("stats")
@click.option("--start", type=click.DateTime(), default=None, help="Range start (UTC).")
@click.option("--end", type=click.DateTime(), default=None, help="Range end (UTC).")
@click.option("--period", default=None, help="week, month, year or all.")
def stats(start: datetime | None, end: datetime | None, period: str | None) -> None:
    """Show order totals for a date range or a relative period."""
    window = SalesWindow.parse(period) if period else None
    try:
        result = build_container().sales.stats(
            start=start, end=end, window=window
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for key, value in result.to_dict().items():
        click.echo(f"{key:<22} {value:>12}")
