"""Port for the email collaborator."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.order import Order


class Notifier(ABC):

    @abstractmethod
    def send(self, template_id: str, recipient: str, order: Order) -> None:
        """Request that *template_id* be sent to *recipient* about *order*."""
