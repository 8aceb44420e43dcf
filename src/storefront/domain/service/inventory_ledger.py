"""Domain service: Inventory Ledger.

Takes stock for every line of an order, or for none of them.  Each
product is decremented with the repository's conditional update
("only if stock >= requested"), so concurrent checkouts can never drive a
counter below zero.  When a later line fails, the decrements already made
in the same call are compensated before the error surfaces.
"""

from __future__ import annotations

import logging

from storefront.domain.exceptions import InsufficientStock, ProductNotFound
from storefront.domain.model.inventory import StockDemand, StockSnapshot
from storefront.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class InventoryLedger:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def reserve(self, demands: list[StockDemand]) -> list[StockSnapshot]:
        """Decrement stock for every demand, all-or-nothing.

        Raises ProductNotFound or InsufficientStock after rolling back
        whatever this call already took.
        """
        taken: list[StockDemand] = []
        snapshots: list[StockSnapshot] = []

        try:
            for demand in demands:
                qty = demand.quantity.value
                product = self._product_repo.decrement_stock(demand.product_id, qty)
                if product is None:
                    current = self._product_repo.get_by_id(demand.product_id)
                    if current is None:
                        raise ProductNotFound(demand.product_id)
                    raise InsufficientStock(demand.product_id, current.stock, qty)

                taken.append(demand)
                snapshots.append(
                    StockSnapshot(
                        product_id=product.id,
                        name=product.name,
                        unit_price=product.price,
                        quantity=demand.quantity,
                        image=product.image,
                    )
                )
        except Exception:
            if taken:
                logger.info("Rolling back %d stock decrement(s)", len(taken))
                self.restore(taken)
            raise

        return snapshots

    def restore(self, demands: list[StockDemand]) -> None:
        """Put quantities back into stock (cancellation or rollback)."""
        for demand in demands:
            self._product_repo.increment_stock(demand.product_id, demand.quantity.value)
