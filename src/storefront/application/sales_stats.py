"""Application service: Sales Aggregator (query).

Reads persisted orders independently of any writes and folds them into a
single ``SalesStats`` record.  An empty window is all zeros, not an error.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.order import utc_now
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.order_repository import OrderRepository

logger = logging.getLogger(__name__)


class SalesWindow(Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"

    @staticmethod
    def parse(raw: str) -> SalesWindow:
        """Unrecognized window names fall back to all-time."""
        for window in SalesWindow:
            if window.value == raw.strip().lower():
                return window
        logger.warning("Unknown sales window %r, using all-time", raw)
        return SalesWindow.ALL

    def start(self, now: datetime) -> datetime | None:
        if self is SalesWindow.WEEK:
            return now - timedelta(days=7)
        if self is SalesWindow.MONTH:
            return _months_back(now, 1)
        if self is SalesWindow.YEAR:
            return _months_back(now, 12)
        return None


def _as_utc(moment: datetime | None) -> datetime | None:
    """Naive datetimes are taken to be UTC."""
    if moment is None or moment.tzinfo is not None:
        return moment
    return moment.replace(tzinfo=timezone.utc)


def _months_back(moment: datetime, months: int) -> datetime:
    """Same day-of-month *months* earlier, clamped to the month's last day."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


@dataclass(frozen=True)
class SalesStats:
    total_orders: int = 0
    coupons_used: int = 0
    total_sales: Money = Money.zero()
    total_shipping_cost: Money = Money.zero()
    total_revenue: Money = Money.zero()

    def to_dict(self) -> dict:
        return {
            "total_orders": self.total_orders,
            "coupons_used": self.coupons_used,
            "total_sales": str(self.total_sales),
            "total_shipping_cost": str(self.total_shipping_cost),
            "total_revenue": str(self.total_revenue),
        }


class SalesAggregator:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def stats(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        window: SalesWindow | None = None,
        now: datetime | None = None,
    ) -> SalesStats:
        """Aggregate orders created in a range.

        An explicit ``start``/``end`` takes precedence over ``window``.
        With neither, every order is included.
        """
        start, end = _as_utc(start), _as_utc(end)
        if start is not None or end is not None:
            if start is not None and end is not None and start > end:
                raise ValidationError("Start date must not be after end date")
        elif window is not None:
            now = now or utc_now()
            start, end = window.start(now), now

        total_orders = 0
        coupons_used = 0
        sales = Money.zero()
        shipping = Money.zero()
        revenue = Money.zero()

        for order in self._order_repo.list_created_between(start, end):
            total_orders += 1
            if order.has_coupon:
                coupons_used += 1
            sales = sales + order.subtotal
            shipping = shipping + order.shipping_cost
            revenue = revenue + order.total_amount

        return SalesStats(
            total_orders=total_orders,
            coupons_used=coupons_used,
            total_sales=sales.quantized(),
            total_shipping_cost=shipping.quantized(),
            total_revenue=revenue.quantized(),
        )
