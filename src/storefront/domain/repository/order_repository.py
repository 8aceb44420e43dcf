"""Abstract repository for the Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from storefront.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate a new opaque order ID."""

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order, assigning an ID if it has none.

        An update never lowers a stored ``stock_restored`` flag and never
        moves a stored Cancelled order elsewhere: the merged values are
        written back onto *order*.
        """

    @abstractmethod
    def list_created_between(
        self, start: datetime | None, end: datetime | None
    ) -> list[Order]:
        """Return orders created within [start, end]; None means unbounded."""

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[Order]:
        """Return a user's orders, newest first."""

    @abstractmethod
    def list_page(
        self, page: int, limit: int, status: OrderStatus | None = None
    ) -> tuple[list[Order], int]:
        """Return one page of orders (newest first) and the matching total."""

    @abstractmethod
    def claim_stock_restoration(self, order_id: str) -> bool:
        """Atomically set the order's ``stock_restored`` flag.

        Returns True only for the caller that flipped it from False, so
        the compensating restock of a cancelled order runs exactly once.
        """
