"""Port for the redirect-based payment gateway."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping

from storefront.domain.model.order import Order
from storefront.domain.model.payment import PaymentNotification, PaymentResult


class PaymentGateway(ABC):

    @abstractmethod
    def build_redirect(self, order: Order) -> PaymentResult:
        """Return a pending PaymentResult carrying the signed redirect URL."""

    @abstractmethod
    def verify(self, fields: Mapping[str, str]) -> PaymentNotification:
        """Check a webhook's signature and parse it.

        Raises SignatureMismatch if the signature is absent or wrong.
        """
