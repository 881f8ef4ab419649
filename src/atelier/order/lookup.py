"""OrderLookup: public order tracking by order number and email.

The caller proves ownership with the email used at checkout. Every failure
raises the same ``ObjectNotFoundError`` so the response never reveals
whether an order number exists.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from atelier.order.order import Order

NOT_FOUND_MESSAGE = "Order not found"


def find_by_order_number_and_email(order_number: str | None, email: str | None) -> Order:
    order_number = (order_number or "").strip()
    email = (email or "").strip().lower()
    if not order_number or not email:
        raise ObjectNotFoundError(NOT_FOUND_MESSAGE)

    order = current_domain.repository_for(Order).find_by_order_number(order_number)
    if order is None or (order.customer_email or "").strip().lower() != email:
        raise ObjectNotFoundError(NOT_FOUND_MESSAGE)
    return order


def summarize(order: Order) -> dict:
    """Customer-safe view of an order: no notes, payment ids or phone number."""
    address = order.shipping_address
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "status": order.status,
        "subtotal": order.pricing.subtotal,
        "shipping_cost": order.pricing.shipping_cost,
        "tax": order.pricing.tax,
        "total": order.pricing.total,
        "currency": order.pricing.currency,
        "shipping_name": order.customer.name if order.customer else None,
        "shipping_address": address.line1 if address else None,
        "shipping_city": address.city if address else None,
        "shipping_postal_code": address.postal_code if address else None,
        "shipping_country": address.country if address else None,
        "carrier_name": order.carrier_name,
        "tracking_number": order.tracking_number,
        "tracking_url": order.tracking_url,
        "created_at": order.created_at,
        "paid_at": order.paid_at,
        "shipped_at": order.shipped_at,
        "items": [
            {
                "product_id": str(item.product_id),
                "product_title": item.product_title,
                "product_slug": item.product_slug,
                "price": item.price,
                "quantity": item.quantity,
            }
            for item in order.items
        ],
    }
