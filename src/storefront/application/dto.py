"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI/HTTP adapters and the application layer
without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from storefront.domain.model.order import Order


@dataclass(frozen=True)
class Requester:
    """Who is calling, as established by the authentication collaborator."""

    user_id: str
    is_admin: bool = False


@dataclass(frozen=True)
class LineItemSpec:
    """Input: what the customer asked for (product id + quantity)."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class CheckoutRequest:
    """Input: a checkout as submitted by the storefront.

    Money figures arrive as strings and are validated, never trusted.
    """

    items: list[LineItemSpec]
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str = ""
    postal_code: str = ""
    country: str = ""
    payment_method: str = "COD"
    coupon_code: str | None = None
    subtotal: str | None = None
    shipping_cost: str | None = None
    discount: str | None = "0"
    total_amount: str | None = None


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_id: str
    name: str
    quantity: int
    unit_price: str  # formatted, e.g. "15.00"
    line_total: str
    image: str | None = None


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str
    status: str
    payment_method: str
    items: list[OrderLineItemDTO]
    subtotal: str
    shipping_cost: str
    discount: str
    total_amount: str
    email: str
    created_at: str
    user_id: str | None = None
    coupon_id: str | None = None
    tracking_id: str | None = None
    delivered_at: str | None = None
    payment_status: str | None = None
    redirect_url: str | None = None

    @staticmethod
    def from_order(order: Order) -> OrderDTO:
        result = order.payment_result
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            status=order.status.value,
            payment_method=order.payment_method.value,
            items=[
                OrderLineItemDTO(
                    product_id=item.product_id,
                    name=item.name,
                    quantity=item.quantity.value,
                    unit_price=str(item.unit_price),
                    line_total=str(item.line_total),
                    image=item.image,
                )
                for item in order.items
            ],
            subtotal=str(order.subtotal),
            shipping_cost=str(order.shipping_cost),
            discount=str(order.discount),
            total_amount=str(order.total_amount),
            email=order.shipping_address.email,
            created_at=order.created_at.isoformat(),
            user_id=order.user_id,
            coupon_id=order.coupon_id,
            tracking_id=order.tracking_id,
            delivered_at=order.delivered_at.isoformat() if order.delivered_at else None,
            payment_status=result.status if result else None,
            redirect_url=result.redirect_url if result else None,
        )


@dataclass(frozen=True)
class OrderPage:
    orders: list[OrderDTO] = field(default_factory=list)
    total_pages: int = 0
    current_page: int = 1
