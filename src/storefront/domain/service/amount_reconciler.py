"""Domain service: Amount Reconciler.

The server is the only source of truth for what an order costs.  The
subtotal is recomputed from the captured unit prices and the client's
declared figures must equal it exactly.  A declared figure finer than one
cent is rejected rather than rounded.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.exceptions import AmountMismatch, ValidationError
from storefront.domain.model.inventory import StockSnapshot
from storefront.domain.model.value_objects import Money


@dataclass(frozen=True)
class DeclaredAmounts:
    """Figures the client sent with the checkout request.

    ``subtotal`` is optional: when present it must also agree with the
    server's computation.
    """

    shipping_cost: Money
    discount: Money
    total_amount: Money
    subtotal: Money | None = None


@dataclass(frozen=True)
class ReconciledAmounts:
    subtotal: Money
    shipping_cost: Money
    discount: Money
    total_amount: Money


class AmountReconciler:

    def reconcile(
        self,
        snapshots: list[StockSnapshot],
        declared: DeclaredAmounts,
    ) -> ReconciledAmounts:
        subtotal = Money.zero()
        for snapshot in snapshots:
            subtotal = subtotal + snapshot.line_total
        subtotal = subtotal.quantized()

        for field, money in (
            ("subtotal", declared.subtotal),
            ("shipping cost", declared.shipping_cost),
            ("discount", declared.discount),
            ("total amount", declared.total_amount),
        ):
            if money is not None and money.quantized() != money:
                raise ValidationError(f"Declared {field} {money.amount} is finer than one cent")

        shipping = declared.shipping_cost.quantized()
        discount = declared.discount.quantized()

        if discount > subtotal + shipping:
            raise ValidationError(
                f"Discount {discount} exceeds order value {subtotal + shipping}"
            )

        if declared.subtotal is not None and declared.subtotal != subtotal:
            raise AmountMismatch("subtotal", declared.subtotal, subtotal)

        expected_total = (subtotal + shipping - discount).quantized()
        if declared.total_amount != expected_total:
            raise AmountMismatch("total amount", declared.total_amount, expected_total)

        return ReconciledAmounts(
            subtotal=subtotal,
            shipping_cost=shipping,
            discount=discount,
            total_amount=expected_total,
        )
