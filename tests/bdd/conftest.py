"""Shared BDD fixtures and step definitions for orders."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

from atelier.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPaid,
    OrderPlaced,
    OrderShipped,
    TrackingUpdated,
)
from atelier.order.order import CustomerSnapshot, Order, OrderItem, OrderPricing

_ORDER_EVENT_CLASSES = {
    "OrderPlaced": OrderPlaced,
    "OrderPaid": OrderPaid,
    "OrderShipped": OrderShipped,
    "OrderDelivered": OrderDelivered,
    "OrderCancelled": OrderCancelled,
    "TrackingUpdated": TrackingUpdated,
}


@pytest.fixture()
def error():
    """Container for capturing exceptions from When steps."""
    return {"exc": None}


def _place(paid):
    order = Order.place(
        order_number="AB-BDD-000001",
        payment_session_id="cs_bdd_1",
        payment_intent_id="pi_bdd_1",
        customer=CustomerSnapshot(name="Giulia Conti", email="giulia@example.com"),
        items=[
            OrderItem(
                product_id="prod-bdd-1",
                product_title="Walnut Writing Desk",
                product_slug="walnut-writing-desk",
                price=420.0,
            )
        ],
        pricing=OrderPricing(subtotal=420.0, shipping_cost=50.0, tax=0.0, total=470.0),
        paid=paid,
    )
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a paid order", target_fixture="order")
def paid_order():
    return _place(paid=True)


@given("a pending order", target_fixture="order")
def pending_order():
    return _place(paid=False)


@given("the order was shipped", target_fixture="order")
def shipped_order(order):
    order.ship(carrier_name="BRT", tracking_number="BRT-1")
    order._events.clear()
    return order


@given("the order was delivered", target_fixture="order")
def delivered_order(order):
    order.deliver()
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then("the order action fails with a validation error")
def order_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("an {event_type} order event is raised"))
def order_event_raised(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in order._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in order._events]}"
