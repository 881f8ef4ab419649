"""Order aggregate: one completed purchase of one or more unique pieces.

State Machine:
    PENDING → PAID → SHIPPED → DELIVERED
    CANCELLED (from PENDING, PAID, SHIPPED)

DELIVERED and CANCELLED are terminal. Timestamps are stamped once and never
cleared, so a cancelled order keeps its payment and shipping history.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from atelier.domain import atelier
from atelier.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPaid,
    OrderPlaced,
    OrderShipped,
    TrackingUpdated,
)

AMOUNT_TOLERANCE = 0.005


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class CancellationActor(Enum):
    SYSTEM = "SYSTEM"
    ADMIN = "ADMIN"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Statuses an admin may request directly; PAID only comes from the payment provider
ADMIN_TARGET_STATUSES = {OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# Tracking metadata exists once the parcel has left
_TRACKABLE_STATES = {OrderStatus.SHIPPED, OrderStatus.DELIVERED}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@atelier.value_object(part_of="Order")
class CustomerSnapshot:
    """Who bought the order, as entered at checkout. Never updated."""

    name = String(max_length=255)
    email = String(max_length=254)
    phone = String(max_length=50)


@atelier.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, as entered at checkout. Never updated."""

    line1 = String(max_length=255)
    line2 = String(max_length=255)
    city = String(max_length=100)
    postal_code = String(max_length=20)
    state = String(max_length=100)
    country = String(max_length=2)


@atelier.value_object(part_of="Order")
class OrderPricing:
    """Amounts charged for the order, locked at payment time."""

    subtotal = Float(required=True, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="EUR")

    @invariant.post
    def total_must_equal_sum_of_parts(self):
        expected = (self.subtotal or 0.0) + (self.shipping_cost or 0.0) + (self.tax or 0.0)
        if abs((self.total or 0.0) - expected) > AMOUNT_TOLERANCE:
            raise ValidationError(
                {"total": [f"Total {self.total} does not equal subtotal + shipping + tax ({expected:.2f})"]}
            )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@atelier.entity(part_of="Order")
class OrderItem:
    """A purchased piece, snapshotted at purchase time.

    ``product_id`` is a weak reference for linking only. The product can be
    re-priced, renamed or deleted later without touching this record.
    """

    product_id = Identifier(required=True)
    product_title = String(required=True, max_length=255)
    product_slug = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(default=1, min_value=1)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@atelier.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_session_id = String(required=True, max_length=255, unique=True)
    payment_intent_id = String(max_length=255)
    user_id = Identifier()  # None for guest checkouts

    customer = ValueObject(CustomerSnapshot)
    shipping_address = ValueObject(ShippingAddress)
    pricing = ValueObject(OrderPricing, required=True)
    items = HasMany(OrderItem)

    tracking_number = String(max_length=255)
    carrier_name = String(max_length=100)
    tracking_url = String(max_length=500)
    internal_notes = Text()
    cancelled_by = String(choices=CancellationActor)

    created_at = DateTime()
    paid_at = DateTime()
    shipped_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        payment_session_id,
        items,
        pricing,
        customer=None,
        shipping_address=None,
        payment_intent_id=None,
        user_id=None,
        paid=False,
    ):
        """Record a completed checkout as a new order.

        Args:
            items: ``OrderItem`` instances, one per purchased piece.
            pricing: ``OrderPricing``; its total invariant is checked on construction.
            paid: True when the provider reported the checkout as paid. The
                order then starts in PAID; otherwise it waits in PENDING for
                the payment-succeeded event.
        """
        now = datetime.now(UTC)
        status = OrderStatus.PAID if paid else OrderStatus.PENDING

        order = cls(
            order_number=order_number,
            payment_session_id=payment_session_id,
            payment_intent_id=payment_intent_id,
            user_id=user_id,
            status=status.value,
            customer=customer,
            shipping_address=shipping_address,
            pricing=pricing,
            items=items,
            created_at=now,
            paid_at=now if paid else None,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                payment_session_id=payment_session_id,
                user_id=str(user_id) if user_id else None,
                status=status.value,
                product_ids=json.dumps(order.product_ids),
                total=pricing.total,
                currency=pricing.currency,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def product_ids(self) -> list[str]:
        return [str(item.product_id) for item in self.items]

    @property
    def customer_email(self) -> str | None:
        return self.customer.email if self.customer else None

    @property
    def tracking(self) -> dict:
        return {
            "carrier_name": self.carrier_name,
            "tracking_number": self.tracking_number,
            "tracking_url": self.tracking_url,
        }

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _apply_tracking(self, carrier_name=None, tracking_number=None, tracking_url=None):
        """Overwrite the tracking fields that were given. An empty string clears one."""
        for field_name, value in (
            ("carrier_name", carrier_name),
            ("tracking_number", tracking_number),
            ("tracking_url", tracking_url),
        ):
            if value is not None:
                setattr(self, field_name, value.strip() or None)

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def mark_paid(self):
        """Promote a PENDING order once the provider confirms the charge."""
        self._assert_can_transition(OrderStatus.PAID)
        now = datetime.now(UTC)
        self.status = OrderStatus.PAID.value
        if self.paid_at is None:
            self.paid_at = now
        self.updated_at = now

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                order_number=self.order_number,
                paid_at=self.paid_at,
            )
        )

    def ship(self, carrier_name=None, tracking_number=None, tracking_url=None):
        """Hand the parcel to the carrier, optionally recording tracking details."""
        self._assert_can_transition(OrderStatus.SHIPPED)
        now = datetime.now(UTC)
        self.status = OrderStatus.SHIPPED.value
        if self.shipped_at is None:
            self.shipped_at = now
        self._apply_tracking(carrier_name, tracking_number, tracking_url)
        self.updated_at = now

        self.raise_(
            OrderShipped(
                order_id=str(self.id),
                order_number=self.order_number,
                carrier_name=self.carrier_name,
                tracking_number=self.tracking_number,
                tracking_url=self.tracking_url,
                shipped_at=self.shipped_at,
            )
        )

    def deliver(self):
        self._assert_can_transition(OrderStatus.DELIVERED)
        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        self.updated_at = now

        self.raise_(
            OrderDelivered(
                order_id=str(self.id),
                order_number=self.order_number,
                delivered_at=now,
            )
        )

    def cancel(self, cancelled_by=CancellationActor.ADMIN.value, reason=None):
        """Cancel the order. Inventory is not touched here."""
        self._assert_can_transition(OrderStatus.CANCELLED)
        previous_status = self.status
        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancelled_by = cancelled_by
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous_status,
                cancelled_by=cancelled_by,
                reason=reason,
                cancelled_at=now,
            )
        )

    def record_payment_failure(self, reason=None):
        """Cancel after the provider reported the charge as failed."""
        message = f"Payment failed: {reason or 'Unknown error'}"
        self.cancel(cancelled_by=CancellationActor.SYSTEM.value, reason=message)
        self.append_internal_note(message)

    # -------------------------------------------------------------------
    # Admin metadata
    # -------------------------------------------------------------------
    def update_tracking(self, carrier_name=None, tracking_number=None, tracking_url=None):
        """Edit tracking details of a shipped or delivered order."""
        if OrderStatus(self.status) not in _TRACKABLE_STATES:
            raise ValidationError(
                {"tracking": [f"Tracking can only be set on shipped or delivered orders, order is {self.status}"]}
            )

        self._apply_tracking(carrier_name, tracking_number, tracking_url)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            TrackingUpdated(
                order_id=str(self.id),
                order_number=self.order_number,
                carrier_name=self.carrier_name,
                tracking_number=self.tracking_number,
                tracking_url=self.tracking_url,
            )
        )

    def set_internal_notes(self, text):
        self.internal_notes = text or None
        self.updated_at = datetime.now(UTC)

    def append_internal_note(self, text):
        self.internal_notes = f"{self.internal_notes}\n\n{text}" if self.internal_notes else text
        self.updated_at = datetime.now(UTC)
