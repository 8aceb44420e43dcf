"""FastAPI HTTP surface for the fulfillment engine.

Identity comes from the authentication collaborator in front of this
service, which forwards ``X-User-Id`` and ``X-User-Role`` headers.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Optional
from urllib.parse import parse_qsl

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.concurrency import run_in_threadpool

from storefront.application.access import require_admin
from storefront.application.dto import CheckoutRequest, LineItemSpec, Requester
from storefront.application.sales_stats import SalesWindow
from storefront.domain.exceptions import (
    AmountMismatch,
    CouponInvalid,
    CouponRequiresAuth,
    DomainException,
    EntityNotFoundError,
    Forbidden,
    InsufficientStock,
    InvalidStatus,
    OrderNotFound,
    SignatureMismatch,
    Unauthorized,
    ValidationError,
)
from storefront.infrastructure.bootstrap import Container, build_container

logger = logging.getLogger(__name__)


# --- Pydantic Schemas ---


class LineItemIn(BaseModel):
    id: str
    quantity: int


class ShippingAddressIn(BaseModel):
    address: Optional[str] = None
    city: str = ""
    postal_code: str = Field("", alias="postalCode")
    country: str = ""

    model_config = ConfigDict(populate_by_name=True)


class CreateOrderIn(BaseModel):
    items: list[LineItemIn] = []
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    shipping_address: Optional[ShippingAddressIn] = Field(None, alias="shippingAddress")
    payment_method: str = Field("COD", alias="paymentMethod")
    coupon_code: Optional[str] = Field(None, alias="couponCode")
    subtotal: Optional[Decimal] = None
    shipping_cost: Optional[Decimal] = Field(None, alias="shippingCost")
    discount: Decimal = Decimal("0")
    total_amount: Optional[Decimal] = Field(None, alias="totalAmount")

    model_config = ConfigDict(populate_by_name=True)

    def to_request(self) -> CheckoutRequest:
        address = self.shipping_address or ShippingAddressIn()
        return CheckoutRequest(
            items=[LineItemSpec(product_id=i.id, quantity=i.quantity) for i in self.items],
            name=self.name,
            email=self.email,
            phone=self.phone,
            address=address.address,
            city=address.city,
            postal_code=address.postal_code,
            country=address.country,
            payment_method=self.payment_method,
            coupon_code=self.coupon_code,
            subtotal=_str_or_none(self.subtotal),
            shipping_cost=_str_or_none(self.shipping_cost),
            discount=str(self.discount),
            total_amount=_str_or_none(self.total_amount),
        )


class StatusUpdateIn(BaseModel):
    status: str
    tracking_id: Optional[str] = Field(None, alias="trackingId")

    model_config = ConfigDict(populate_by_name=True)


def _str_or_none(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


# --- Error mapping ---

ERROR_STATUS_CODES: dict[type[DomainException], int] = {
    ValidationError: 400,
    AmountMismatch: 400,
    CouponInvalid: 400,
    CouponRequiresAuth: 400,
    InvalidStatus: 400,
    SignatureMismatch: 400,
    InsufficientStock: 409,
    EntityNotFoundError: 404,
    Unauthorized: 401,
    Forbidden: 403,
}


def status_code_for(exc: DomainException) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 400


def get_requester(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Optional[Requester]:
    if not x_user_id:
        return None
    return Requester(user_id=x_user_id, is_admin=(x_user_role or "").lower() == "admin")


def create_app(container: Container | None = None) -> FastAPI:
    container = container or build_container()
    app = FastAPI(title="Storefront Fulfillment API", version="0.1.0")

    @app.exception_handler(DomainException)
    async def domain_error_handler(request: Request, exc: DomainException) -> JSONResponse:
        """Map DomainException subclasses to appropriate HTTP responses."""
        return JSONResponse(
            status_code=status_code_for(exc),
            content={"kind": exc.kind, "detail": str(exc)},
        )

    @app.exception_handler(Exception)
    async def server_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500, content={"kind": "server_error", "detail": "Server error"}
        )

    # --- Orders ---

    @app.post("/api/orders", status_code=201)
    def create_order(body: CreateOrderIn, requester: Optional[Requester] = Depends(get_requester)):
        user_id = requester.user_id if requester else None
        dto = container.create_order.handle(body.to_request(), user_id=user_id)
        return asdict(dto)

    @app.get("/api/orders/mine")
    def my_orders(requester: Optional[Requester] = Depends(get_requester)):
        return [asdict(dto) for dto in container.list_user_orders.handle(requester)]

    @app.get("/api/orders/stats")
    def sales_stats(
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        period: Optional[str] = None,
        requester: Optional[Requester] = Depends(get_requester),
    ):
        require_admin(requester)
        window = SalesWindow.parse(period) if period else None
        return container.sales.stats(start=start, end=end, window=window).to_dict()

    @app.get("/api/orders")
    def list_orders(
        page: int = Query(1),
        limit: int = Query(20),
        status: Optional[str] = None,
        requester: Optional[Requester] = Depends(get_requester),
    ):
        return asdict(container.list_orders.handle(requester, page, limit, status))

    @app.get("/api/orders/{order_id}")
    def get_order(order_id: str, requester: Optional[Requester] = Depends(get_requester)):
        return asdict(container.show_order.handle(requester, order_id))

    @app.put("/api/orders/{order_id}/status")
    def update_status(
        order_id: str,
        body: StatusUpdateIn,
        requester: Optional[Requester] = Depends(get_requester),
    ):
        dto = container.update_status.handle(
            requester, order_id, body.status, tracking_id=body.tracking_id
        )
        return asdict(dto)

    # --- Payment gateway ---

    @app.post("/api/payments/notify", response_class=PlainTextResponse)
    async def payment_notify(request: Request):
        """Gateway webhook.  Answers with a bare acknowledgement or rejection."""
        body = (await request.body()).decode("utf-8", errors="replace")
        fields = dict(parse_qsl(body, keep_blank_values=True))
        try:
            await run_in_threadpool(container.apply_payment.handle, fields)
        except OrderNotFound:
            return PlainTextResponse("Order not found", status_code=404)
        except DomainException:
            return PlainTextResponse("Invalid notification", status_code=400)
        return PlainTextResponse("OK", status_code=200)

    return app
