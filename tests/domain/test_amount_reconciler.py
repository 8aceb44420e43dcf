"""Unit tests for the AmountReconciler domain service."""

import pytest

from storefront.domain.exceptions import AmountMismatch, ValidationError
from storefront.domain.model.inventory import StockSnapshot
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.service.amount_reconciler import AmountReconciler, DeclaredAmounts


def _snapshot(price: str, qty: int) -> StockSnapshot:
    return StockSnapshot(
        product_id="p1", name="Widget", unit_price=Money.of(price), quantity=Quantity(qty)
    )


def _declared(total: str, shipping: str = "10", discount: str = "5", subtotal=None):
    return DeclaredAmounts(
        shipping_cost=Money.of(shipping),
        discount=Money.of(discount),
        total_amount=Money.of(total),
        subtotal=Money.of(subtotal) if subtotal is not None else None,
    )


class TestReconcile:

    def test_matching_total_accepted(self):
        amounts = AmountReconciler().reconcile([_snapshot("50", 2)], _declared("105"))
        assert amounts.subtotal == Money.of("100.00")
        assert amounts.total_amount == Money.of("105.00")

    def test_off_by_one_total_rejected(self):
        with pytest.raises(AmountMismatch, match="total amount") as excinfo:
            AmountReconciler().reconcile([_snapshot("50", 2)], _declared("106"))
        assert excinfo.value.expected == Money.of("105.00")

    def test_sub_cent_difference_rejected(self):
        with pytest.raises(AmountMismatch):
            AmountReconciler().reconcile([_snapshot("50", 2)], _declared("105.01"))

    def test_client_prices_are_never_used(self):
        """The subtotal comes from the snapshot, not from what the client sent."""
        with pytest.raises(AmountMismatch, match="subtotal"):
            AmountReconciler().reconcile(
                [_snapshot("50", 2)], _declared("15", subtotal="10")
            )

    def test_discount_larger_than_order_rejected(self):
        with pytest.raises(ValidationError, match="exceeds order value"):
            AmountReconciler().reconcile(
                [_snapshot("5", 1)], _declared("0", shipping="0", discount="6")
            )

    def test_fractional_prices_sum_at_cent_precision(self):
        amounts = AmountReconciler().reconcile(
            [_snapshot("0.10", 3)], _declared("0.30", shipping="0", discount="0")
        )
        assert amounts.total_amount == Money.of("0.30")

    def test_sub_cent_declared_total_rejected_not_rounded(self):
        with pytest.raises(ValidationError, match="finer than one cent"):
            AmountReconciler().reconcile([_snapshot("50", 2)], _declared("105.004"))

    def test_sub_cent_declared_subtotal_rejected(self):
        with pytest.raises(ValidationError, match="Declared subtotal"):
            AmountReconciler().reconcile(
                [_snapshot("50", 2)], _declared("105", subtotal="100.001")
            )

    def test_trailing_zeros_are_not_a_mismatch(self):
        amounts = AmountReconciler().reconcile([_snapshot("50", 2)], _declared("105.000"))
        assert amounts.total_amount == Money.of("105.00")
