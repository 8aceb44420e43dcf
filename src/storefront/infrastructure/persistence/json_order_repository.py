"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from storefront.domain.exceptions import OrderNotFound
from storefront.domain.model.order import Order, OrderLineItem, OrderStatus
from storefront.domain.model.payment import PaymentMethod, PaymentResult
from storefront.domain.model.value_objects import Money, Quantity, ShippingAddress
from storefront.domain.repository.order_repository import OrderRepository
from storefront.infrastructure.persistence.json_store import JsonFileStore


def _dt(raw: str | None) -> datetime | None:
    return datetime.fromisoformat(raw) if raw else None


def _money(raw: str) -> Money:
    return Money(Decimal(raw))


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path, lock_timeout: float = 5.0) -> None:
        self._store = JsonFileStore(file_path, lock_timeout)

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> str:
        return uuid.uuid4().hex

    def get_by_id(self, order_id: str) -> Order | None:
        for raw in self._store.read():
            if raw["id"] == order_id:
                return self.to_domain(raw)
        return None

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self.next_id()

        with self._store.transaction() as records:
            # Upsert: replace if exists, otherwise append
            for i, raw in enumerate(records):
                if raw["id"] == order.id:
                    order.absorb_stored_state(
                        OrderStatus(raw["status"]), raw.get("stock_restored", False)
                    )
                    records[i] = self.to_raw(order)
                    break
            else:
                records.append(self.to_raw(order))

    def list_created_between(
        self, start: datetime | None, end: datetime | None
    ) -> list[Order]:
        orders = [self.to_domain(raw) for raw in self._store.read()]
        return [
            o for o in orders
            if (start is None or o.created_at >= start)
            and (end is None or o.created_at <= end)
        ]

    def list_for_user(self, user_id: str) -> list[Order]:
        orders = [
            self.to_domain(raw) for raw in self._store.read()
            if raw.get("user_id") == user_id
        ]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def list_page(
        self, page: int, limit: int, status: OrderStatus | None = None
    ) -> tuple[list[Order], int]:
        raws = [
            raw for raw in self._store.read()
            if status is None or raw["status"] == status.value
        ]
        raws.sort(key=lambda raw: raw["created_at"], reverse=True)
        offset = (page - 1) * limit
        return [self.to_domain(raw) for raw in raws[offset:offset + limit]], len(raws)

    def claim_stock_restoration(self, order_id: str) -> bool:
        with self._store.transaction() as records:
            for raw in records:
                if raw["id"] == order_id:
                    if raw.get("stock_restored"):
                        return False
                    raw["stock_restored"] = True
                    return True
        raise OrderNotFound(order_id)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def to_raw(order: Order) -> dict:
        address = order.shipping_address
        result = order.payment_result
        return {
            "id": order.id,
            "user_id": order.user_id,
            "status": order.status.value,
            "payment_method": order.payment_method.value,
            "items": [
                {
                    "product_id": item.product_id,
                    "name": item.name,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                    "image": item.image,
                }
                for item in order.items
            ],
            "shipping_address": {
                "full_name": address.full_name,
                "email": address.email,
                "phone": address.phone,
                "address": address.address,
                "city": address.city,
                "postal_code": address.postal_code,
                "country": address.country,
            },
            "subtotal": str(order.subtotal.amount),
            "shipping_cost": str(order.shipping_cost.amount),
            "discount": str(order.discount.amount),
            "total_amount": str(order.total_amount.amount),
            "coupon_id": order.coupon_id,
            "payment_result": None if result is None else {
                "status": result.status,
                "transaction_id": result.transaction_id,
                "update_time": result.update_time.isoformat() if result.update_time else None,
                "raw": result.raw,
                "redirect_url": result.redirect_url,
            },
            "tracking_id": order.tracking_id,
            "delivered_at": order.delivered_at.isoformat() if order.delivered_at else None,
            "stock_restored": order.stock_restored,
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
        }

    @staticmethod
    def to_domain(raw: dict) -> Order:
        items = [
            OrderLineItem(
                product_id=i["product_id"],
                name=i["name"],
                quantity=Quantity(i["quantity"]),
                unit_price=_money(i["unit_price"]),
                image=i.get("image"),
            )
            for i in raw["items"]
        ]
        pr = raw.get("payment_result")
        payment_result = None if pr is None else PaymentResult(
            status=pr["status"],
            transaction_id=pr.get("transaction_id"),
            update_time=_dt(pr.get("update_time")),
            raw=pr.get("raw") or {},
            redirect_url=pr.get("redirect_url"),
        )
        return Order(
            id=raw["id"],
            items=items,
            shipping_address=ShippingAddress(**raw["shipping_address"]),
            payment_method=PaymentMethod(raw["payment_method"]),
            subtotal=_money(raw["subtotal"]),
            shipping_cost=_money(raw["shipping_cost"]),
            discount=_money(raw["discount"]),
            total_amount=_money(raw["total_amount"]),
            status=OrderStatus(raw["status"]),
            user_id=raw.get("user_id"),
            coupon_id=raw.get("coupon_id"),
            payment_result=payment_result,
            tracking_id=raw.get("tracking_id"),
            delivered_at=_dt(raw.get("delivered_at")),
            stock_restored=raw.get("stock_restored", False),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )
