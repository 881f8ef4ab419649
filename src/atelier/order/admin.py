"""OrderAdminController: back-office operations on a single order.

Mutations go through commands; notifications are sent only after the
command has been committed, and their failure is reported, not raised.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from atelier.notification.dispatcher import DispatchOutcome
from atelier.order.notes import AppendInternalNote, UpdateInternalNotes
from atelier.order.order import Order, OrderStatus
from atelier.order.status import ChangeOrderStatus
from atelier.order.tracking import UpdateTracking

logger = structlog.get_logger(__name__)

_RESENDABLE_STATES = {OrderStatus.SHIPPED, OrderStatus.DELIVERED}
_CLOSED_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


@dataclass(frozen=True)
class TrackingDetails:
    carrier_name: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.carrier_name or self.tracking_number or self.tracking_url)

    def as_dict(self) -> dict:
        return {
            "carrier_name": self.carrier_name,
            "tracking_number": self.tracking_number,
            "tracking_url": self.tracking_url,
        }


@dataclass(frozen=True)
class AdminUpdateResult:
    order: Order
    notification: DispatchOutcome | None = None


class OrderAdminController:
    def __init__(self, dispatcher):
        self.dispatcher = dispatcher

    @staticmethod
    def _orders():
        return current_domain.repository_for(Order)

    def get_order(self, order_id: str) -> Order:
        return self._orders().get(order_id)

    def list_orders(self, status=None, user_id=None, limit=50, offset=0):
        if status is not None:
            try:
                OrderStatus(status)
            except ValueError:
                raise ValidationError({"status": [f"Unknown order status: {status}"]}) from None
        return self._orders().list_orders(status=status, user_id=user_id, limit=limit, offset=offset)

    def update_status(
        self,
        order_id: str,
        new_status: str,
        tracking: TrackingDetails | None = None,
        notify: bool = False,
    ) -> AdminUpdateResult:
        """Move the order to SHIPPED, DELIVERED or CANCELLED.

        ``notify`` sends the shipment email when the order becomes SHIPPED
        and is ignored for other targets.
        """
        tracking = tracking or TrackingDetails()
        current_domain.process(
            ChangeOrderStatus(order_id=order_id, status=new_status, **tracking.as_dict()),
            asynchronous=False,
        )
        order = self.get_order(order_id)
        logger.info("Order status changed by admin", order_number=order.order_number, status=order.status)

        notification = None
        if notify and order.status == OrderStatus.SHIPPED.value:
            notification = self.dispatcher.send_shipment_notice(order)
        return AdminUpdateResult(order=order, notification=notification)

    def update_tracking(self, order_id: str, tracking: TrackingDetails) -> Order:
        current_domain.process(UpdateTracking(order_id=order_id, **tracking.as_dict()), asynchronous=False)
        return self.get_order(order_id)

    def update_internal_notes(self, order_id: str, text: str | None) -> Order:
        current_domain.process(UpdateInternalNotes(order_id=order_id, notes=text), asynchronous=False)
        return self.get_order(order_id)

    def update_order(
        self,
        order_id: str,
        status: str | None = None,
        tracking: TrackingDetails | None = None,
        internal_notes: str | None = None,
        notify: bool = False,
    ) -> AdminUpdateResult:
        """Apply a combined edit: status first, then tracking, then notes.

        Requesting the current status of an open order leaves it alone; a
        closed order rejects every status request. A rejected status change
        raises before anything else is written.
        """
        notification = None
        tracking_pending = tracking is not None and not tracking.is_empty

        if status is not None and self._should_apply_status(order_id, status):
            # Shipping takes the tracking details along in the same change
            shipping_now = status == OrderStatus.SHIPPED.value
            result = self.update_status(
                order_id, status, tracking=tracking if shipping_now else None, notify=notify
            )
            notification = result.notification
            tracking_pending = tracking_pending and not shipping_now

        if tracking_pending:
            self.update_tracking(order_id, tracking)

        if internal_notes is not None:
            self.update_internal_notes(order_id, internal_notes)

        return AdminUpdateResult(order=self.get_order(order_id), notification=notification)

    def _should_apply_status(self, order_id: str, status: str) -> bool:
        current = self.get_order(order_id).status
        return status != current or OrderStatus(current) in _CLOSED_STATES

    def resend_shipment_notification(
        self,
        order_id: str,
        tracking_override: TrackingDetails | None = None,
        persist_override: bool = False,
    ) -> DispatchOutcome:
        """Send the shipment email again, optionally saving new tracking first."""
        order = self.get_order(order_id)

        if OrderStatus(order.status) not in _RESENDABLE_STATES:
            raise ValidationError(
                {"status": [f"Shipment notification can only be sent for shipped orders, order is {order.status}"]}
            )
        if not order.customer_email:
            raise ValidationError({"customer": ["Order has no customer email address"]})

        override = tracking_override or TrackingDetails()
        if persist_override and not override.is_empty:
            self.update_tracking(order_id, override)
            summary = ", ".join(f"{key}={value}" for key, value in override.as_dict().items() if value)
            current_domain.process(
                AppendInternalNote(order_id=order_id, note=f"Tracking updated on resend: {summary}"),
                asynchronous=False,
            )
            order = self.get_order(order_id)

        outcome = self.dispatcher.send_shipment_notice(order, tracking=override.as_dict())
        logger.info(
            "Shipment notification resent",
            order_number=order.order_number,
            recipient=outcome.recipient,
            sent=outcome.sent,
        )
        return outcome
