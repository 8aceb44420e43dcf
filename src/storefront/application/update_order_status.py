"""Application service: Update Order Status use case (admin)."""

from __future__ import annotations

from storefront.application.access import require_admin
from storefront.application.dto import OrderDTO, Requester
from storefront.application.order_lifecycle import OrderLifecycle
from storefront.domain.exceptions import OrderNotFound
from storefront.domain.model.order import OrderStatus
from storefront.domain.repository.order_repository import OrderRepository


class UpdateOrderStatusHandler:

    def __init__(self, order_repo: OrderRepository, lifecycle: OrderLifecycle) -> None:
        self._order_repo = order_repo
        self._lifecycle = lifecycle

    def handle(
        self,
        requester: Requester | None,
        order_id: str,
        status: str,
        tracking_id: str | None = None,
    ) -> OrderDTO:
        require_admin(requester)
        target = OrderStatus.parse(status)

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)

        self._lifecycle.apply(order, target, tracking_id=tracking_id)
        return OrderDTO.from_order(order)
