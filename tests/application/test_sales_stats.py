"""Tests for the sales aggregator."""

from datetime import datetime, timezone

import pytest

from storefront.application.sales_stats import SalesAggregator, SalesStats, SalesWindow
from storefront.domain.exceptions import ValidationError
from tests.fakes import FakeOrderRepository, make_order

NOW = datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc)


def _setup():
    orders = FakeOrderRepository()
    # 100 + 10 shipping
    orders.save(make_order(order_id="o-recent", created_at=datetime(2024, 3, 29, tzinfo=timezone.utc)))
    # 40 + 10 shipping - 5 discount, with a coupon
    orders.save(make_order(
        items=[("p2", 2, "20.00")],
        order_id="o-month",
        coupon_id="c1",
        discount="5.00",
        created_at=datetime(2024, 3, 10, tzinfo=timezone.utc),
    ))
    # 30 + 0 shipping
    orders.save(make_order(
        items=[("p3", 1, "30.00")],
        order_id="o-old",
        shipping="0",
        created_at=datetime(2023, 6, 1, tzinfo=timezone.utc),
    ))
    return SalesAggregator(orders)


class TestSalesAggregator:

    def test_empty_store_is_all_zeros(self):
        stats = SalesAggregator(FakeOrderRepository()).stats()
        assert stats == SalesStats()
        assert stats.to_dict() == {
            "total_orders": 0,
            "coupons_used": 0,
            "total_sales": "0.00",
            "total_shipping_cost": "0.00",
            "total_revenue": "0.00",
        }

    def test_all_time(self):
        stats = _setup().stats()
        assert stats.total_orders == 3
        assert stats.coupons_used == 1
        assert str(stats.total_sales) == "170.00"
        assert str(stats.total_shipping_cost) == "20.00"
        assert str(stats.total_revenue) == "185.00"

    def test_week_window(self):
        stats = _setup().stats(window=SalesWindow.WEEK, now=NOW)
        assert stats.total_orders == 1
        assert str(stats.total_revenue) == "110.00"

    def test_month_window(self):
        stats = _setup().stats(window=SalesWindow.MONTH, now=NOW)
        assert stats.total_orders == 2
        assert stats.coupons_used == 1

    def test_explicit_range_wins_over_window(self):
        stats = _setup().stats(
            start=datetime(2023, 1, 1, tzinfo=timezone.utc),
            end=datetime(2023, 12, 31, tzinfo=timezone.utc),
            window=SalesWindow.WEEK,
            now=NOW,
        )
        assert stats.total_orders == 1
        assert str(stats.total_sales) == "30.00"

    def test_naive_range_is_treated_as_utc(self):
        stats = _setup().stats(start=datetime(2024, 3, 1), end=datetime(2024, 3, 31))
        assert stats.total_orders == 2

    def test_start_after_end_rejected(self):
        with pytest.raises(ValidationError):
            _setup().stats(
                start=datetime(2024, 3, 31, tzinfo=timezone.utc),
                end=datetime(2024, 3, 1, tzinfo=timezone.utc),
            )


class TestSalesWindow:

    def test_parse_is_case_insensitive(self):
        assert SalesWindow.parse(" Month ") is SalesWindow.MONTH

    def test_unknown_window_means_all_time(self):
        assert SalesWindow.parse("fortnight") is SalesWindow.ALL
        assert SalesWindow.ALL.start(NOW) is None

    def test_month_back_clamps_day(self):
        assert SalesWindow.MONTH.start(NOW) == datetime(2024, 2, 29, 12, 0, tzinfo=timezone.utc)

    def test_year_back(self):
        assert SalesWindow.YEAR.start(NOW) == datetime(2023, 3, 31, 12, 0, tzinfo=timezone.utc)
