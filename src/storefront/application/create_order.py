"""Application service: Create Order use case (checkout).

Orchestrates the ledger, reconciler and coupon validator so that an
order is created together with its stock decrements or not at all:

1. Validate and parse the request, resolve the coupon (no side effects yet).
2. Take stock for every line item (all-or-nothing, snapshots returned).
3. Recompute the amounts from the snapshots; reject client disagreement.
4. Persist the order in ``Processing``; sign a gateway redirect if needed.

Any failure after step 2 puts the taken stock back before re-raising.
"""

from __future__ import annotations

import logging

from storefront.application.dto import CheckoutRequest, OrderDTO
from storefront.application.notifications import NotificationDispatcher
from storefront.domain.exceptions import CouponInvalid, ValidationError
from storefront.domain.model.inventory import StockDemand
from storefront.domain.model.order import TEMPLATE_CONFIRMATION, Order, OrderLineItem
from storefront.domain.model.payment import PaymentMethod
from storefront.domain.model.value_objects import Money, Quantity, ShippingAddress
from storefront.domain.repository.coupon_repository import CouponRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.amount_reconciler import AmountReconciler, DeclaredAmounts
from storefront.domain.service.coupon_validator import CouponValidator
from storefront.domain.service.inventory_ledger import InventoryLedger
from storefront.domain.service.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "email", "phone", "name", "address", "subtotal", "shipping_cost", "total_amount",
)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        coupon_repo: CouponRepository,
        gateway: PaymentGateway,
        notifications: NotificationDispatcher,
    ) -> None:
        self._order_repo = order_repo
        self._ledger = InventoryLedger(product_repo)
        self._reconciler = AmountReconciler()
        self._coupons = CouponValidator(coupon_repo)
        self._gateway = gateway
        self._notifications = notifications

    def handle(self, request: CheckoutRequest, user_id: str | None = None) -> OrderDTO:
        """Create an order from a checkout request.

        ``user_id`` is None for guest checkout.
        """
        self._check_required(request)
        if not request.items:
            raise ValidationError("No order items specified")

        address = ShippingAddress(
            full_name=request.name.strip(),  # type: ignore[union-attr]
            email=request.email.strip(),  # type: ignore[union-attr]
            phone=request.phone.strip(),  # type: ignore[union-attr]
            address=request.address.strip(),  # type: ignore[union-attr]
            city=request.city,
            postal_code=request.postal_code,
            country=request.country,
        )
        method = PaymentMethod.parse(request.payment_method)
        declared = DeclaredAmounts(
            subtotal=Money.of(request.subtotal),  # type: ignore[arg-type]
            shipping_cost=Money.of(request.shipping_cost),  # type: ignore[arg-type]
            discount=Money.of(request.discount or "0"),
            total_amount=Money.of(request.total_amount),  # type: ignore[arg-type]
        )
        demands = [
            StockDemand(product_id=spec.product_id, quantity=Quantity(spec.quantity))
            for spec in request.items
        ]

        if not declared.discount.is_zero and not request.coupon_code:
            raise CouponInvalid("A discount requires a valid coupon")
        coupon = self._coupons.validate(request.coupon_code, user_id)

        snapshots = self._ledger.reserve(demands)
        try:
            amounts = self._reconciler.reconcile(snapshots, declared)

            order = Order.create(
                items=[OrderLineItem.from_snapshot(s) for s in snapshots],
                shipping_address=address,
                payment_method=method,
                subtotal=amounts.subtotal,
                shipping_cost=amounts.shipping_cost,
                discount=amounts.discount,
                user_id=user_id,
                coupon_id=coupon.id if coupon else None,
            )
            order.id = self._order_repo.next_id()
            if method.requires_redirect:
                order.record_payment(self._gateway.build_redirect(order))
            self._order_repo.save(order)
        except Exception:
            self._ledger.restore([s.as_demand() for s in snapshots])
            raise

        logger.info(
            "Order %s created: %d item(s), total %s, payment %s",
            order.id, len(order.items), order.total_amount, method.value,
        )

        if order.is_guest:
            self._notifications.dispatch(TEMPLATE_CONFIRMATION, order)

        return OrderDTO.from_order(order)

    @staticmethod
    def _check_required(request: CheckoutRequest) -> None:
        missing = []
        for name in REQUIRED_FIELDS:
            value = getattr(request, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
