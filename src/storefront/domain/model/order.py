"""Order aggregate and its status state machine.

The Order is an aggregate root that owns its line items.  Status changes
go through ``Order.transition_to`` which consults the explicit
``TRANSITIONS`` table; side effects (restock, notifications) are described
by the returned ``Transition`` and carried out by the application layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from storefront.domain.exceptions import InvalidStatus, ValidationError
from storefront.domain.model.inventory import StockDemand, StockSnapshot
from storefront.domain.model.payment import PaymentMethod, PaymentResult
from storefront.domain.model.value_objects import Money, Quantity, ShippingAddress


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(Enum):
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    TRACKING = "Tracking"

    @staticmethod
    def parse(raw: str | None) -> OrderStatus:
        for status in OrderStatus:
            if status.value == raw:
                return status
        raise InvalidStatus(f"Invalid status value: {raw!r}")


class SideEffect(Enum):
    RESTOCK = "restock"
    STAMP_DELIVERED = "stamp_delivered"


# Notification template ids understood by the email collaborator.
TEMPLATE_CONFIRMATION = "orderConfirmation"
TEMPLATE_SHIPPED = "orderShipped"
TEMPLATE_TRACKING = "orderTracking"
TEMPLATE_DELIVERED = "orderDelivered"
TEMPLATE_CANCELLED = "orderCancelled"


@dataclass(frozen=True)
class Transition:
    source: OrderStatus
    target: OrderStatus
    effects: tuple[SideEffect, ...] = ()
    template: str | None = None

    @property
    def changes_status(self) -> bool:
        return self.source is not self.target

    def has(self, effect: SideEffect) -> bool:
        return effect in self.effects


TRANSITIONS: dict[tuple[OrderStatus, OrderStatus], Transition] = {}


def _allow(
    sources: tuple[OrderStatus, ...],
    target: OrderStatus,
    effects: tuple[SideEffect, ...] = (),
    template: str | None = None,
) -> None:
    for source in sources:
        TRANSITIONS[(source, target)] = Transition(source, target, effects, template)


_IN_FULFILLMENT = (OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.TRACKING)
_NOT_CANCELLED = _IN_FULFILLMENT + (OrderStatus.DELIVERED,)

_allow(_IN_FULFILLMENT, OrderStatus.SHIPPED, template=TEMPLATE_SHIPPED)
_allow(_IN_FULFILLMENT, OrderStatus.TRACKING, template=TEMPLATE_TRACKING)
_allow(
    _NOT_CANCELLED,
    OrderStatus.DELIVERED,
    (SideEffect.STAMP_DELIVERED,),
    TEMPLATE_DELIVERED,
)
_allow(_NOT_CANCELLED, OrderStatus.CANCELLED, (SideEffect.RESTOCK,), TEMPLATE_CANCELLED)

# Re-applying the current status (a tracking id update, a duplicate
# webhook) is always allowed and never repeats a side effect.
for _status in OrderStatus:
    TRANSITIONS[(_status, _status)] = Transition(_status, _status)


@dataclass(frozen=True)
class OrderLineItem:
    """Captures the product as it was at order-creation time."""

    product_id: str
    name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    image: str | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    @staticmethod
    def from_snapshot(snapshot: StockSnapshot) -> OrderLineItem:
        return OrderLineItem(
            product_id=snapshot.product_id,
            name=snapshot.name,
            quantity=snapshot.quantity,
            unit_price=snapshot.unit_price,
            image=snapshot.image,
        )


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINE_ITEMS = 50


@dataclass
class Order:
    """Aggregate root for storefront orders.

    Use the ``Order.create()`` factory for new orders; it enforces the
    amount invariant.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: str | None
    items: list[OrderLineItem]
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    subtotal: Money
    shipping_cost: Money
    discount: Money
    total_amount: Money
    status: OrderStatus = OrderStatus.PROCESSING
    user_id: str | None = None
    coupon_id: str | None = None
    payment_result: PaymentResult | None = None
    tracking_id: str | None = None
    delivered_at: datetime | None = None
    stock_restored: bool = False
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        items: list[OrderLineItem],
        shipping_address: ShippingAddress,
        payment_method: PaymentMethod,
        subtotal: Money,
        shipping_cost: Money,
        discount: Money,
        user_id: str | None = None,
        coupon_id: str | None = None,
    ) -> Order:
        """Create a new order in ``Processing``, enforcing all invariants."""
        if not items:
            raise ValidationError("Order must contain at least one item")

        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        computed = Money.zero()
        for item in items:
            computed = computed + item.line_total
        if computed.quantized() != subtotal.quantized():
            raise ValidationError(
                f"Subtotal {subtotal} does not match line items ({computed})"
            )

        total = (subtotal + shipping_cost - discount).quantized()

        return Order(
            id=None,
            items=list(items),
            shipping_address=shipping_address,
            payment_method=payment_method,
            subtotal=subtotal.quantized(),
            shipping_cost=shipping_cost.quantized(),
            discount=discount.quantized(),
            total_amount=total,
            user_id=user_id,
            coupon_id=coupon_id,
        )

    # --- State transitions ----------------------------------------------------

    def transition_to(
        self,
        target: OrderStatus,
        tracking_id: str | None = None,
        now: datetime | None = None,
    ) -> Transition:
        """Move to *target* if the transition table allows it.

        Returns the ``Transition`` so the caller can run its side effects.
        Raises InvalidStatus for transitions the table does not list.
        """
        transition = TRANSITIONS.get((self.status, target))
        if transition is None:
            raise InvalidStatus(
                f"Cannot change order {self.id} from {self.status.value} "
                f"to {target.value}"
            )

        now = now or utc_now()
        if tracking_id:
            self.tracking_id = tracking_id
        self.status = target
        if transition.has(SideEffect.STAMP_DELIVERED):
            self.delivered_at = now
        self.updated_at = now
        return transition

    def record_payment(self, result: PaymentResult, now: datetime | None = None) -> None:
        self.payment_result = result
        self.updated_at = now or utc_now()

    def absorb_stored_state(self, status: OrderStatus, stock_restored: bool) -> None:
        """Keep a cancellation or restock another writer already stored.

        A copy loaded before a concurrent cancel must not resurrect the
        order or clear its restock flag when it is saved.
        """
        if stock_restored:
            self.stock_restored = True
        if status is OrderStatus.CANCELLED:
            self.status = OrderStatus.CANCELLED

    # --- Computed properties --------------------------------------------------

    @property
    def has_coupon(self) -> bool:
        return self.coupon_id is not None

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    def stock_demands(self) -> list[StockDemand]:
        return [
            StockDemand(product_id=item.product_id, quantity=item.quantity)
            for item in self.items
        ]

    def is_owned_by(self, user_id: str | None) -> bool:
        return user_id is not None and self.user_id == user_id
