"""Payment-related value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from storefront.domain.exceptions import ValidationError


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "COD"
    GATEWAY_REDIRECT = "PayFast"

    @property
    def requires_redirect(self) -> bool:
        return self is PaymentMethod.GATEWAY_REDIRECT

    @staticmethod
    def parse(raw: str) -> PaymentMethod:
        for method in PaymentMethod:
            if method.value.lower() == (raw or "").strip().lower():
                return method
        allowed = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError(f"Invalid payment method {raw!r} (expected one of: {allowed})")


# Provider status codes carried in ``payment_status``.
PROVIDER_COMPLETE = "COMPLETE"
PROVIDER_FAILED = "FAILED"
PAYMENT_PENDING = "pending"


@dataclass(frozen=True)
class PaymentResult:
    """Snapshot of the latest payment information recorded on an order.

    Right after checkout a redirect order carries a ``pending`` result with
    the redirect URL; webhook application replaces it with the provider's
    transaction id, status and raw payload.
    """

    status: str
    transaction_id: str | None = None
    update_time: datetime | None = None
    raw: dict[str, str] = field(default_factory=dict)
    redirect_url: str | None = None

    def same_snapshot(self, other: PaymentResult | None) -> bool:
        """True if *other* records the same provider outcome (timestamps ignored)."""
        if other is None:
            return False
        return (
            self.transaction_id == other.transaction_id
            and self.status == other.status
            and self.raw == other.raw
        )


@dataclass(frozen=True)
class PaymentNotification:
    """A verified inbound gateway message.  Never persisted as-is."""

    order_id: str
    transaction_id: str | None
    provider_status: str
    fields: dict[str, str]

    def to_result(self, received_at: datetime) -> PaymentResult:
        return PaymentResult(
            status=self.provider_status,
            transaction_id=self.transaction_id,
            update_time=received_at,
            raw=dict(self.fields),
        )
