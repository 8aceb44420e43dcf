"""Application service: runs order status transitions and their side effects.

The domain ``Order.transition_to`` decides whether a move is legal and
which effects it carries; this service performs them:

- RESTOCK: put every line item back, at most once per order.  The
  repository's atomic claim makes concurrent cancellations restock once.
- notification template: dispatched after the status change is saved.
"""

from __future__ import annotations

import logging

from storefront.application.notifications import NotificationDispatcher
from storefront.domain.model.order import Order, OrderStatus, SideEffect, Transition
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.service.inventory_ledger import InventoryLedger

logger = logging.getLogger(__name__)


class OrderLifecycle:

    def __init__(
        self,
        order_repo: OrderRepository,
        ledger: InventoryLedger,
        notifications: NotificationDispatcher,
    ) -> None:
        self._order_repo = order_repo
        self._ledger = ledger
        self._notifications = notifications

    def apply(
        self,
        order: Order,
        target: OrderStatus,
        tracking_id: str | None = None,
    ) -> Transition:
        transition = order.transition_to(target, tracking_id=tracking_id)

        if transition.has(SideEffect.RESTOCK):
            if self._order_repo.claim_stock_restoration(order.id):  # type: ignore[arg-type]
                self._ledger.restore(order.stock_demands())
                logger.info("Restocked %d line item(s) for order %s", len(order.items), order.id)
            else:
                logger.warning("Stock for order %s was already restored", order.id)
            order.stock_restored = True

        self._order_repo.save(order)

        if transition.changes_status:
            logger.info(
                "Order %s moved %s -> %s",
                order.id, transition.source.value, transition.target.value,
            )
        if transition.template is not None:
            self._notifications.dispatch(transition.template, order)

        return transition
