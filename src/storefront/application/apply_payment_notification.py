"""Application service: Apply Payment Notification use case (webhook).

Verification happens first; nothing is read or written for a message
whose signature does not match.  Application is idempotent: a replayed
notification finds the same payment snapshot already recorded and the
lifecycle treats "already cancelled" as a no-op, so duplicates never
restock twice.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from storefront.application.order_lifecycle import OrderLifecycle
from storefront.domain.exceptions import OrderNotFound, SignatureMismatch
from storefront.domain.model.order import Order, OrderStatus, utc_now
from storefront.domain.model.payment import PROVIDER_FAILED
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.service.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


class ApplyPaymentNotificationHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        gateway: PaymentGateway,
        lifecycle: OrderLifecycle,
    ) -> None:
        self._order_repo = order_repo
        self._gateway = gateway
        self._lifecycle = lifecycle

    def handle(self, fields: Mapping[str, str]) -> Order:
        try:
            notification = self._gateway.verify(fields)
        except SignatureMismatch:
            logger.warning("Rejected payment notification with a bad signature")
            raise

        order = self._order_repo.get_by_id(notification.order_id)
        if order is None:
            raise OrderNotFound(notification.order_id)

        result = notification.to_result(utc_now())
        changed = False
        if result.same_snapshot(order.payment_result):
            logger.info("Duplicate payment notification for order %s", order.id)
        else:
            order.record_payment(result)
            changed = True
            logger.info(
                "Payment %s recorded for order %s (transaction %s)",
                result.status, order.id, result.transaction_id,
            )

        provider_status = notification.provider_status.upper()
        if provider_status == PROVIDER_FAILED and order.status is not OrderStatus.CANCELLED:
            self._lifecycle.apply(order, OrderStatus.CANCELLED)
        elif changed:
            # COMPLETE keeps a Processing order where it is; later
            # fulfillment states are never moved backwards by a payment.
            self._order_repo.save(order)

        return order
