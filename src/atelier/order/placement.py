"""Order placement: command and handler.

The only way an order comes into existence. Issued by the payment handler
once a checkout session has completed at the provider.

The handler does not look for an existing order first. ``payment_session_id``
and ``order_number`` are unique in the store, so a second placement for the
same session is rejected on save; the payment handler turns that rejection
into an idempotent no-op.
"""

import json

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from atelier.domain import atelier
from atelier.order.numbering import generate_order_number
from atelier.order.order import (
    CustomerSnapshot,
    Order,
    OrderItem,
    OrderPricing,
    ShippingAddress,
)

logger = structlog.get_logger(__name__)


@atelier.command(part_of="Order")
class PlaceOrder:
    payment_session_id = String(required=True, max_length=255)
    payment_intent_id = String(max_length=255)
    user_id = Identifier()
    customer = Text()  # JSON: name, email, phone
    shipping_address = Text()  # JSON: address dict
    items = Text(required=True)  # JSON: list of item snapshots
    subtotal = Float(required=True)
    shipping_cost = Float(default=0.0)
    tax = Float(default=0.0)
    total = Float(required=True)
    currency = String(max_length=3, default="EUR")
    paid = Boolean(default=False)


def _loads(value):
    return json.loads(value) if isinstance(value, str) else value


@atelier.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        repo = current_domain.repository_for(Order)

        customer = _loads(command.customer) or {}
        address = _loads(command.shipping_address) or {}
        items = [
            OrderItem(
                product_id=item["product_id"],
                product_title=item["product_title"],
                product_slug=item["product_slug"],
                price=item["price"],
                quantity=item.get("quantity", 1),
            )
            for item in _loads(command.items)
        ]

        order = Order.place(
            order_number=generate_order_number(),
            payment_session_id=command.payment_session_id,
            payment_intent_id=command.payment_intent_id,
            user_id=command.user_id,
            customer=CustomerSnapshot(**customer) if customer else None,
            shipping_address=ShippingAddress(**address) if address else None,
            items=items,
            pricing=OrderPricing(
                subtotal=command.subtotal,
                shipping_cost=command.shipping_cost or 0.0,
                tax=command.tax or 0.0,
                total=command.total,
                currency=command.currency or "EUR",
            ),
            paid=command.paid,
        )
        repo.add(order)

        logger.info(
            "Order placed",
            order_number=order.order_number,
            payment_session_id=order.payment_session_id,
            status=order.status,
            total=order.pricing.total,
        )
        return str(order.id)
