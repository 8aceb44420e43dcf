"""Abstract repository for the Product view.

Defined in the domain layer so the domain never depends on
infrastructure.  Concrete implementations (JSON, in-memory) live in the
infrastructure layer and in the test fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product."""

    @abstractmethod
    def decrement_stock(self, product_id: str, quantity: int) -> Product | None:
        """Atomically take *quantity* units if at least that many are in stock.

        Returns the product as it is after the decrement, or None if the
        stock was insufficient (nothing changed).  Raises ProductNotFound
        if the product does not exist.  The check and the write must be
        one atomic step.
        """

    @abstractmethod
    def increment_stock(self, product_id: str, quantity: int) -> None:
        """Atomically add *quantity* units back to stock."""
