"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass

from storefront.application.apply_payment_notification import (
    ApplyPaymentNotificationHandler,
)
from storefront.application.create_order import CreateOrderHandler
from storefront.application.notifications import NotificationDispatcher
from storefront.application.order_lifecycle import OrderLifecycle
from storefront.application.sales_stats import SalesAggregator
from storefront.application.show_order import (
    ListOrdersHandler,
    ListUserOrdersHandler,
    ShowOrderHandler,
)
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.repository.coupon_repository import CouponRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.inventory_ledger import InventoryLedger
from storefront.domain.service.notifier import Notifier
from storefront.domain.service.payment_gateway import PaymentGateway
from storefront.infrastructure.notifications.json_outbox import JsonOutboxNotifier
from storefront.infrastructure.payments.signed_redirect import SignedRedirectGateway
from storefront.infrastructure.persistence.json_coupon_repository import (
    JsonCouponRepository,
)
from storefront.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from storefront.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from storefront.infrastructure.settings import Settings


@dataclass
class Container:
    """Every use case the adapters (CLI, HTTP) can call."""

    product_repo: ProductRepository
    order_repo: OrderRepository
    create_order: CreateOrderHandler
    update_status: UpdateOrderStatusHandler
    apply_payment: ApplyPaymentNotificationHandler
    show_order: ShowOrderHandler
    list_user_orders: ListUserOrdersHandler
    list_orders: ListOrdersHandler
    sales: SalesAggregator

    @staticmethod
    def from_repositories(
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        coupon_repo: CouponRepository,
        gateway: PaymentGateway,
        notifier: Notifier,
        executor: Executor | None = None,
    ) -> Container:
        notifications = NotificationDispatcher(notifier, executor)
        lifecycle = OrderLifecycle(order_repo, InventoryLedger(product_repo), notifications)
        return Container(
            product_repo=product_repo,
            order_repo=order_repo,
            create_order=CreateOrderHandler(
                order_repo, product_repo, coupon_repo, gateway, notifications
            ),
            update_status=UpdateOrderStatusHandler(order_repo, lifecycle),
            apply_payment=ApplyPaymentNotificationHandler(order_repo, gateway, lifecycle),
            show_order=ShowOrderHandler(order_repo),
            list_user_orders=ListUserOrdersHandler(order_repo),
            list_orders=ListOrdersHandler(order_repo),
            sales=SalesAggregator(order_repo),
        )


def product_repository(settings: Settings) -> JsonProductRepository:
    return JsonProductRepository(settings.data_dir / "products.json", settings.lock_timeout)


def order_repository(settings: Settings) -> JsonOrderRepository:
    return JsonOrderRepository(settings.data_dir / "orders.json", settings.lock_timeout)


def coupon_repository(settings: Settings) -> JsonCouponRepository:
    return JsonCouponRepository(settings.data_dir / "coupons.json", settings.lock_timeout)


def notifier(settings: Settings) -> JsonOutboxNotifier:
    return JsonOutboxNotifier(settings.data_dir / "outbox.json", settings.lock_timeout)


def build_container(settings: Settings | None = None) -> Container:
    settings = settings or Settings.from_env()
    executor = None
    if settings.notify_workers > 0:
        executor = ThreadPoolExecutor(
            max_workers=settings.notify_workers, thread_name_prefix="notify"
        )
    return Container.from_repositories(
        order_repo=order_repository(settings),
        product_repo=product_repository(settings),
        coupon_repo=coupon_repository(settings),
        gateway=SignedRedirectGateway(settings.gateway),
        notifier=notifier(settings),
        executor=executor,
    )
