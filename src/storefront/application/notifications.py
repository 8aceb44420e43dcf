"""Hands notification requests to the email collaborator.

A failed dispatch is logged and dropped; it never propagates into the
operation that triggered it.  With an executor the request leaves the
caller's thread entirely.
"""

from __future__ import annotations

import copy
import logging
from concurrent.futures import Executor

from storefront.domain.model.order import Order
from storefront.domain.service.notifier import Notifier

logger = logging.getLogger(__name__)


class NotificationDispatcher:

    def __init__(self, notifier: Notifier, executor: Executor | None = None) -> None:
        self._notifier = notifier
        self._executor = executor

    def dispatch(self, template_id: str, order: Order) -> None:
        recipient = order.shipping_address.email
        snapshot = copy.deepcopy(order)

        if self._executor is None:
            self._send(template_id, recipient, snapshot)
            return

        try:
            self._executor.submit(self._send, template_id, recipient, snapshot)
        except RuntimeError:
            logger.exception(
                "Could not queue %s notification for order %s", template_id, order.id
            )

    def _send(self, template_id: str, recipient: str, order: Order) -> None:
        try:
            self._notifier.send(template_id, recipient, order)
        except Exception:
            logger.exception(
                "Notification %s for order %s to %s failed",
                template_id, order.id, recipient,
            )
        else:
            logger.debug("Notification %s queued for order %s", template_id, order.id)
