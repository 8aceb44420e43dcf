"""Tests for notification dispatch isolation."""

from concurrent.futures import ThreadPoolExecutor

from storefront.application.notifications import NotificationDispatcher
from storefront.domain.model.order import TEMPLATE_SHIPPED, OrderStatus
from tests.fakes import FailingNotifier, RecordingNotifier, make_order


class TestNotificationDispatcher:

    def test_inline_dispatch_uses_order_email(self):
        notifier = RecordingNotifier()
        NotificationDispatcher(notifier).dispatch(TEMPLATE_SHIPPED, make_order())
        assert notifier.sent == [(TEMPLATE_SHIPPED, "alice@example.com", "ord-1")]

    def test_executor_dispatch(self):
        notifier = RecordingNotifier()
        with ThreadPoolExecutor(max_workers=1) as executor:
            NotificationDispatcher(notifier, executor).dispatch(TEMPLATE_SHIPPED, make_order())
        assert notifier.templates == [TEMPLATE_SHIPPED]

    def test_sends_a_snapshot_of_the_order(self):
        class CapturingNotifier(RecordingNotifier):
            def send(self, template_id, recipient, order):
                self.order = order

        notifier = CapturingNotifier()
        order = make_order()
        NotificationDispatcher(notifier).dispatch(TEMPLATE_SHIPPED, order)
        order.status = OrderStatus.CANCELLED
        assert notifier.order.status is OrderStatus.PROCESSING

    def test_failure_is_logged_not_raised(self, caplog):
        NotificationDispatcher(FailingNotifier()).dispatch(TEMPLATE_SHIPPED, make_order())
        assert "Notification orderShipped for order ord-1" in caplog.text
        assert "mail server down" in caplog.text

    def test_shut_down_executor_is_logged(self, caplog):
        executor = ThreadPoolExecutor(max_workers=1)
        executor.shutdown()
        NotificationDispatcher(RecordingNotifier(), executor).dispatch(TEMPLATE_SHIPPED, make_order())
        assert "Could not queue orderShipped notification" in caplog.text
