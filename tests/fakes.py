"""In-memory fakes for testing.

These implement the same abstract interfaces as the JSON repositories
but keep everything in a dict. No file I/O, no side effects.  Conditional
updates take a lock so threaded tests exercise real contention.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal

from storefront.domain.exceptions import OrderNotFound, ProductNotFound, SignatureMismatch
from storefront.domain.model.coupon import Coupon, normalize_code
from storefront.domain.model.order import Order, OrderLineItem, OrderStatus
from storefront.domain.model.payment import PaymentMethod, PaymentNotification, PaymentResult
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money, Quantity, ShippingAddress
from storefront.domain.repository.coupon_repository import CouponRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.notifier import Notifier
from storefront.domain.service.payment_gateway import PaymentGateway


class FakeProductRepository(ProductRepository):

    def __init__(self, products: list[Product] | None = None) -> None:
        self._store: dict[str, Product] = {}
        self._lock = threading.Lock()
        self.decrement_calls = 0
        for p in products or []:
            self._store[p.id] = p

    def get_by_id(self, product_id: str) -> Product | None:
        product = self._store.get(product_id)
        return copy.copy(product) if product else None

    def save(self, product: Product) -> None:
        self._store[product.id] = copy.copy(product)

    def decrement_stock(self, product_id: str, quantity: int) -> Product | None:
        with self._lock:
            self.decrement_calls += 1
            product = self._store.get(product_id)
            if product is None:
                raise ProductNotFound(product_id)
            if product.stock < quantity:
                return None
            product.stock -= quantity
            return copy.copy(product)

    def increment_stock(self, product_id: str, quantity: int) -> None:
        with self._lock:
            product = self._store.get(product_id)
            if product is None:
                raise ProductNotFound(product_id)
            product.stock += quantity

    def stock_of(self, product_id: str) -> int:
        return self._store[product_id].stock


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store: dict[str, Order] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self.fail_on_save = False

    def next_id(self) -> str:
        with self._lock:
            order_id = f"ord-{self._next_id}"
            self._next_id += 1
            return order_id

    def get_by_id(self, order_id: str) -> Order | None:
        order = self._store.get(order_id)
        return copy.deepcopy(order) if order else None

    def save(self, order: Order) -> None:
        if self.fail_on_save:
            raise RuntimeError("store unavailable")
        if order.id is None:
            order.id = self.next_id()
        with self._lock:
            stored = self._store.get(order.id)
            if stored is not None:
                order.absorb_stored_state(stored.status, stored.stock_restored)
            self._store[order.id] = copy.deepcopy(order)

    def list_created_between(
        self, start: datetime | None, end: datetime | None
    ) -> list[Order]:
        return [
            copy.deepcopy(o) for o in self._store.values()
            if (start is None or o.created_at >= start)
            and (end is None or o.created_at <= end)
        ]

    def list_for_user(self, user_id: str) -> list[Order]:
        orders = [copy.deepcopy(o) for o in self._store.values() if o.user_id == user_id]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def list_page(
        self, page: int, limit: int, status: OrderStatus | None = None
    ) -> tuple[list[Order], int]:
        orders = sorted(
            (o for o in self._store.values() if status is None or o.status is status),
            key=lambda o: o.created_at,
            reverse=True,
        )
        offset = (page - 1) * limit
        return [copy.deepcopy(o) for o in orders[offset:offset + limit]], len(orders)

    def claim_stock_restoration(self, order_id: str) -> bool:
        with self._lock:
            order = self._store.get(order_id)
            if order is None:
                raise OrderNotFound(order_id)
            if order.stock_restored:
                return False
            order.stock_restored = True
            return True

    def all(self) -> list[Order]:
        return list(self._store.values())


class FakeCouponRepository(CouponRepository):

    def __init__(self, coupons: list[Coupon] | None = None) -> None:
        self._store = {normalize_code(c.code): c for c in coupons or []}

    def get_by_code(self, code: str) -> Coupon | None:
        return self._store.get(normalize_code(code))


class FakePaymentGateway(PaymentGateway):
    """Accepts any notification whose signature is 'valid'."""

    def build_redirect(self, order: Order) -> PaymentResult:
        return PaymentResult(status="pending", redirect_url=f"https://pay.test/?m_payment_id={order.id}")

    def verify(self, fields: Mapping[str, str]) -> PaymentNotification:
        data = dict(fields)
        if data.pop("signature", None) != "valid":
            raise SignatureMismatch()
        return PaymentNotification(
            order_id=data["m_payment_id"],
            transaction_id=data.get("pf_payment_id"),
            provider_status=data.get("payment_status", ""),
            fields=data,
        )


class RecordingNotifier(Notifier):

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str | None]] = []

    def send(self, template_id: str, recipient: str, order: Order) -> None:
        self.sent.append((template_id, recipient, order.id))

    @property
    def templates(self) -> list[str]:
        return [template for template, _, _ in self.sent]


class FailingNotifier(Notifier):

    def send(self, template_id: str, recipient: str, order: Order) -> None:
        raise ConnectionError("mail server down")


def make_order(
    items: list[tuple[str, int, str]] | None = None,
    status: OrderStatus = OrderStatus.PROCESSING,
    order_id: str | None = "ord-1",
    user_id: str | None = "user-1",
    coupon_id: str | None = None,
    shipping: str = "10.00",
    discount: str = "0",
    created_at: datetime | None = None,
    payment_method: PaymentMethod = PaymentMethod.CASH_ON_DELIVERY,
) -> Order:
    """Build an order directly from (product_id, qty, unit_price) tuples."""
    items = items or [("p1", 2, "50.00")]
    line_items = [
        OrderLineItem(
            product_id=pid,
            name=f"Product {pid}",
            quantity=Quantity(qty),
            unit_price=Money.of(price),
        )
        for pid, qty, price in items
    ]
    subtotal = sum((Decimal(price) * qty for _, qty, price in items), Decimal("0"))
    order = Order.create(
        items=line_items,
        shipping_address=ShippingAddress(
            full_name="Alice", email="alice@example.com", phone="0820000000"
        ),
        payment_method=payment_method,
        subtotal=Money(subtotal),
        shipping_cost=Money.of(shipping),
        discount=Money.of(discount),
        user_id=user_id,
        coupon_id=coupon_id,
    )
    order.id = order_id
    order.status = status
    if created_at is not None:
        order.created_at = created_at
    return order
