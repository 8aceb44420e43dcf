"""Integration tests for admin status changes and the order lifecycle."""

import threading

import pytest

from storefront.application.dto import Requester
from storefront.application.notifications import NotificationDispatcher
from storefront.application.order_lifecycle import OrderLifecycle
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.exceptions import Forbidden, InvalidStatus, OrderNotFound, Unauthorized
from storefront.domain.model.order import (
    TEMPLATE_CANCELLED,
    TEMPLATE_DELIVERED,
    TEMPLATE_SHIPPED,
    OrderStatus,
)
from storefront.domain.model.payment import PaymentResult
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.service.inventory_ledger import InventoryLedger
from tests.fakes import (
    FailingNotifier,
    FakeOrderRepository,
    FakeProductRepository,
    RecordingNotifier,
    make_order,
)

ADMIN = Requester(user_id="admin", is_admin=True)
CUSTOMER = Requester(user_id="user-1")


def _setup(notifier=None, status=OrderStatus.PROCESSING):
    products = FakeProductRepository([
        Product(id="p1", name="Olive Oil", price=Money.of("50.00"), stock=1),
        Product(id="p2", name="Vinegar", price=Money.of("20.00"), stock=0),
    ])
    orders = FakeOrderRepository()
    orders.save(make_order(items=[("p1", 2, "50.00"), ("p2", 3, "20.00")], status=status))
    notifier = notifier or RecordingNotifier()
    lifecycle = OrderLifecycle(orders, InventoryLedger(products), NotificationDispatcher(notifier))
    return UpdateOrderStatusHandler(orders, lifecycle), orders, products, notifier


class TestAccess:

    def test_anonymous_rejected(self):
        handler, _, _, _ = _setup()
        with pytest.raises(Unauthorized):
            handler.handle(None, "ord-1", "Shipped")

    def test_customer_rejected(self):
        handler, _, _, _ = _setup()
        with pytest.raises(Forbidden):
            handler.handle(CUSTOMER, "ord-1", "Shipped")


class TestStatusChanges:

    def test_ship_with_tracking_id(self):
        handler, orders, _, notifier = _setup()
        dto = handler.handle(ADMIN, "ord-1", "Shipped", tracking_id="TRK1")
        assert dto.status == "Shipped"
        assert dto.tracking_id == "TRK1"
        assert notifier.templates == [TEMPLATE_SHIPPED]
        assert orders.get_by_id("ord-1").status is OrderStatus.SHIPPED

    def test_deliver_stamps_timestamp(self):
        handler, orders, _, notifier = _setup(status=OrderStatus.SHIPPED)
        handler.handle(ADMIN, "ord-1", "Delivered")
        assert orders.get_by_id("ord-1").delivered_at is not None
        assert notifier.templates == [TEMPLATE_DELIVERED]

    def test_cancel_restores_exact_quantities(self):
        handler, orders, products, notifier = _setup()
        handler.handle(ADMIN, "ord-1", "Cancelled")
        assert products.stock_of("p1") == 3
        assert products.stock_of("p2") == 3
        assert orders.get_by_id("ord-1").stock_restored is True
        assert notifier.templates == [TEMPLATE_CANCELLED]

    def test_cancelling_twice_restocks_once(self):
        handler, _, products, notifier = _setup()
        handler.handle(ADMIN, "ord-1", "Cancelled")
        handler.handle(ADMIN, "ord-1", "Cancelled")
        assert products.stock_of("p1") == 3
        assert notifier.templates == [TEMPLATE_CANCELLED]

    def test_concurrent_cancellations_restock_once(self):
        handler, _, products, _ = _setup()
        barrier = threading.Barrier(4)

        def cancel():
            barrier.wait()
            handler.handle(ADMIN, "ord-1", "Cancelled")

        threads = [threading.Thread(target=cancel) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert products.stock_of("p1") == 3
        assert products.stock_of("p2") == 3

    def test_tracking_id_update_keeps_processing_without_restock(self):
        handler, orders, products, notifier = _setup()
        handler.handle(ADMIN, "ord-1", "Processing", tracking_id="TRK2")
        order = orders.get_by_id("ord-1")
        assert order.status is OrderStatus.PROCESSING
        assert order.tracking_id == "TRK2"
        assert products.stock_of("p1") == 1
        assert notifier.sent == []

    def test_invalid_status_value(self):
        handler, _, _, _ = _setup()
        with pytest.raises(InvalidStatus):
            handler.handle(ADMIN, "ord-1", "Teleported")

    def test_unknown_order(self):
        handler, _, _, _ = _setup()
        with pytest.raises(OrderNotFound):
            handler.handle(ADMIN, "missing", "Shipped")

    def test_notification_failure_does_not_roll_back(self, caplog):
        handler, orders, products, _ = _setup(notifier=FailingNotifier())
        dto = handler.handle(ADMIN, "ord-1", "Cancelled")
        assert dto.status == "Cancelled"
        assert orders.get_by_id("ord-1").status is OrderStatus.CANCELLED
        assert products.stock_of("p1") == 3
        assert "Notification orderCancelled for order ord-1" in caplog.text

    def test_stale_copy_saved_after_cancel_does_not_undo_it(self):
        handler, orders, products, _ = _setup()
        stale = orders.get_by_id("ord-1")

        handler.handle(ADMIN, "ord-1", "Cancelled")
        stale.record_payment(PaymentResult(status="COMPLETE", transaction_id="pf-1"))
        orders.save(stale)

        order = orders.get_by_id("ord-1")
        assert order.status is OrderStatus.CANCELLED
        assert order.stock_restored is True
        assert order.payment_result.transaction_id == "pf-1"

        handler.handle(ADMIN, "ord-1", "Cancelled")
        assert products.stock_of("p1") == 3
        assert products.stock_of("p2") == 3
