"""Application tests for single notification sends."""

import pytest

from atelier.notification.channel.fake_email import FakeEmailAdapter
from atelier.notification.dispatcher import NotificationDispatcher
from atelier.notification.kinds import NotificationKind


@pytest.fixture
def dispatcher(email):
    return NotificationDispatcher(storefront_url="https://shop.example.com/")


class TestOrderConfirmation:
    def test_sent_to_customer_with_tracking_link(self, dispatcher, place_order, email):
        order = place_order()

        outcome = dispatcher.send_order_confirmation(order)

        assert outcome.sent is True
        assert outcome.kind == NotificationKind.ORDER_CONFIRMATION
        [message] = email.sent_to("giulia.conti@example.com")
        assert order.order_number in message["subject"]
        assert "https://shop.example.com/order-tracking" in message["body"]

    def test_missing_email_is_skipped(self, dispatcher, place_order, email):
        order = place_order(email=None)

        outcome = dispatcher.send_order_confirmation(order)

        assert outcome.sent is False
        assert outcome.error == "No recipient address"
        assert email.sent_emails == []


class TestAdminAlert:
    def test_sent_to_given_address(self, dispatcher, place_order, email):
        order = place_order()

        outcome = dispatcher.send_admin_new_order(order, "owner@atelier.test")

        assert outcome.sent is True
        [message] = email.sent_to("owner@atelier.test")
        assert "Giulia Conti" in message["body"]

    def test_no_admin_address_configured(self, dispatcher, place_order, email):
        outcome = dispatcher.send_admin_new_order(place_order(), None)

        assert outcome.sent is False
        assert email.sent_emails == []


class TestFailures:
    def test_adapter_failure_reported(self, dispatcher, place_order, email):
        email.configure(should_succeed=False, failure_reason="SMTP timeout")

        outcome = dispatcher.send_order_confirmation(place_order())

        assert outcome.sent is False
        assert outcome.error == "SMTP timeout"

    def test_adapter_exception_contained(self, place_order):
        class BrokenAdapter(FakeEmailAdapter):
            def send(self, to, subject, body, html_body=None):
                raise ConnectionError("connection refused")

        dispatcher = NotificationDispatcher(channel=BrokenAdapter())

        outcome = dispatcher.send_order_confirmation(place_order())

        assert outcome.sent is False
        assert "connection refused" in outcome.error

    def test_order_placed_fan_out_continues_past_failure(self, dispatcher, place_order, email):
        order = place_order()
        email.configure(failing_recipients={"giulia.conti@example.com"})

        outcomes = dispatcher.notify_order_placed(order, order.product_ids, admin_email="owner@atelier.test")

        assert [o.sent for o in outcomes] == [False, True]
        assert len(email.sent_to("owner@atelier.test")) == 1


def test_shipment_override_takes_precedence(dispatcher, place_order, email):
    order = place_order()

    dispatcher.send_shipment_notice(order, tracking={"carrier_name": "DHL", "tracking_number": None})

    body = email.sent_emails[0]["body"]
    assert "Carrier: DHL" in body
    assert "Tracking details will follow." not in body
