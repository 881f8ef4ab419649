"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, String, Text

from atelier.domain import atelier


@atelier.event(part_of="Order")
class OrderPlaced:
    """A completed checkout was recorded as an order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    payment_session_id = String(required=True)
    user_id = Identifier()
    status = String(required=True)
    product_ids = Text(required=True)  # JSON list
    total = Float(required=True)
    currency = String(required=True)
    placed_at = DateTime(required=True)


@atelier.event(part_of="Order")
class OrderPaid:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    paid_at = DateTime(required=True)


@atelier.event(part_of="Order")
class OrderShipped:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    carrier_name = String()
    tracking_number = String()
    tracking_url = String()
    shipped_at = DateTime(required=True)


@atelier.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    delivered_at = DateTime(required=True)


@atelier.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled, by an admin or by a failed payment."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    cancelled_by = String(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)


@atelier.event(part_of="Order")
class TrackingUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    carrier_name = String()
    tracking_number = String()
    tracking_url = String()
