"""Application service: order read use cases (queries)."""

from __future__ import annotations

import math

from storefront.application.access import require_admin, require_authenticated
from storefront.application.dto import OrderDTO, OrderPage, Requester
from storefront.domain.exceptions import Forbidden, OrderNotFound, ValidationError
from storefront.domain.model.order import OrderStatus
from storefront.domain.repository.order_repository import OrderRepository

MAX_PAGE_SIZE = 100


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, requester: Requester | None, order_id: str) -> OrderDTO:
        """Return one order to its owner or to an admin."""
        requester = require_authenticated(requester)
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        if not (requester.is_admin or order.is_owned_by(requester.user_id)):
            raise Forbidden("Unauthorized access")
        return OrderDTO.from_order(order)


class ListUserOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, requester: Requester | None) -> list[OrderDTO]:
        requester = require_authenticated(requester)
        return [
            OrderDTO.from_order(order)
            for order in self._order_repo.list_for_user(requester.user_id)
        ]


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        requester: Requester | None,
        page: int = 1,
        limit: int = 20,
        status: str | None = None,
    ) -> OrderPage:
        """Admin listing, newest first, optionally filtered by status."""
        require_admin(requester)
        if page < 1 or not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(
                f"page must be >= 1 and limit between 1 and {MAX_PAGE_SIZE}"
            )
        status_filter = OrderStatus.parse(status) if status else None

        orders, count = self._order_repo.list_page(page, limit, status_filter)
        return OrderPage(
            orders=[OrderDTO.from_order(o) for o in orders],
            total_pages=math.ceil(count / limit),
            current_page=page,
        )
