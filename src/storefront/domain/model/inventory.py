"""Stock demands and the snapshots a successful reservation produces."""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.model.value_objects import Money, Quantity


@dataclass(frozen=True)
class StockDemand:
    """How many units of one product an order needs."""

    product_id: str
    quantity: Quantity


@dataclass(frozen=True)
class StockSnapshot:
    """What a product looked like at the moment its stock was decremented.

    Orders copy these values into their line items so later catalog
    changes never affect an existing order.
    """

    product_id: str
    name: str
    unit_price: Money
    quantity: Quantity
    image: str | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    def as_demand(self) -> StockDemand:
        return StockDemand(product_id=self.product_id, quantity=self.quantity)
