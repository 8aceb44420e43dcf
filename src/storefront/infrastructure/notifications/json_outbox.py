"""Notification outbox for the email collaborator.

Requests are appended to a JSON file which the mail worker drains; the
engine never talks to an SMTP server itself.
"""

from __future__ import annotations

import uuid
from pathlib import Path

from storefront.domain.model.order import Order, utc_now
from storefront.domain.service.notifier import Notifier
from storefront.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from storefront.infrastructure.persistence.json_store import JsonFileStore


class JsonOutboxNotifier(Notifier):

    def __init__(self, file_path: Path, lock_timeout: float = 5.0) -> None:
        self._store = JsonFileStore(file_path, lock_timeout)

    def send(self, template_id: str, recipient: str, order: Order) -> None:
        with self._store.transaction() as records:
            records.append(
                {
                    "id": uuid.uuid4().hex,
                    "template_id": template_id,
                    "recipient": recipient,
                    "requested_at": utc_now().isoformat(),
                    "order": JsonOrderRepository.to_raw(order),
                }
            )

    def pending(self) -> list[dict]:
        return self._store.read()
