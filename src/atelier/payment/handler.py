"""PaymentEventHandler: turns verified payment events into durable state.

Entry points match the internal gateway events:

- ``CheckoutCompleted``: record the order once per checkout session, mark
  the pieces sold, then notify customer, wishlists and admin.
- ``PaymentSucceeded``: backup path promoting a PENDING order to PAID.
- ``PaymentFailed``: cancel the order and put its pieces back on sale.

Each one may be redelivered by the provider and is idempotent. Durable
changes (order, then inventory) always complete before any notification
is attempted, and notifications never undo them.
"""

import json
from dataclasses import dataclass
from enum import Enum

import structlog
from protean.exceptions import ConfigurationError, ValidationError
from protean.utils.globals import current_domain
from sqlalchemy.exc import IntegrityError

from atelier.gateway.port import (
    CheckoutCompleted,
    CheckoutSessionDetail,
    PaymentFailed,
    PaymentSucceeded,
)
from atelier.order.order import Order, OrderStatus
from atelier.order.payment import RecordPayment, RecordPaymentFailure
from atelier.order.placement import PlaceOrder
from atelier.product.product import Product
from atelier.settings.provider import admin_email_from

logger = structlog.get_logger(__name__)

UNKNOWN_PRODUCT_TITLE = "Unknown Product"


class WebhookAction(Enum):
    ORDER_CREATED = "order_created"
    DUPLICATE = "duplicate"
    ORDER_PAID = "order_paid"
    ORDER_CANCELLED = "order_cancelled"
    IGNORED = "ignored"


@dataclass(frozen=True)
class WebhookOutcome:
    action: WebhookAction
    order_id: str | None = None


class PaymentEventHandler:
    """Sequences order store, inventory ledger and notifications per event.

    Args:
        gateway: ``PaymentGateway`` used to fetch full checkout sessions.
        ledger: ``InventoryLedger``.
        dispatcher: ``NotificationDispatcher``.
        settings_provider: zero-argument callable returning ``SiteSettings``.
    """

    def __init__(self, gateway, ledger, dispatcher, settings_provider):
        self.gateway = gateway
        self.ledger = ledger
        self.dispatcher = dispatcher
        self.settings_provider = settings_provider

    def handle(self, event) -> WebhookOutcome:
        if isinstance(event, CheckoutCompleted):
            return self.on_checkout_completed(event)
        if isinstance(event, PaymentSucceeded):
            return self.on_payment_succeeded(event)
        if isinstance(event, PaymentFailed):
            return self.on_payment_failed(event)

        logger.info("Ignoring unsupported payment event", event_type=type(event).__name__)
        return WebhookOutcome(action=WebhookAction.IGNORED)

    @staticmethod
    def _orders():
        return current_domain.repository_for(Order)

    # -------------------------------------------------------------------
    # Checkout completed
    # -------------------------------------------------------------------
    def on_checkout_completed(self, event: CheckoutCompleted) -> WebhookOutcome:
        log = logger.bind(payment_session_id=event.session_id)

        existing = self._orders().find_by_session(event.session_id)
        if existing is not None:
            return self._resume_recorded_order(existing, log)

        session = self.gateway.retrieve_checkout_session(event.session_id)

        order_id, created = self._place_order(session)
        if not created:
            return WebhookOutcome(action=WebhookAction.DUPLICATE, order_id=order_id)

        order = self._orders().get(order_id)
        reservation = self.ledger.reserve_as_sold(order.product_ids)
        if reservation.already_sold:
            log.warning(
                "Paid order contains pieces that could not be marked sold",
                order_number=order.order_number,
                product_ids=reservation.already_sold,
            )

        self._notify_order_placed(order, reservation.succeeded)
        return WebhookOutcome(action=WebhookAction.ORDER_CREATED, order_id=order_id)

    def _resume_recorded_order(self, order, log) -> WebhookOutcome:
        """Answer a redelivery for a session that already has an order.

        A delivery that failed after the order was stored left its pieces on
        sale and sent nothing. Re-reserving is a no-op for pieces already sold,
        so any piece that moves now belongs to that interrupted delivery and
        the order's notifications are sent here instead.
        """
        outcome = WebhookOutcome(action=WebhookAction.DUPLICATE, order_id=str(order.id))
        if OrderStatus(order.status) not in (OrderStatus.PENDING, OrderStatus.PAID):
            log.info("Order already recorded for checkout session", order_number=order.order_number)
            return outcome

        reservation = self.ledger.reserve_as_sold(order.product_ids)
        if not reservation.succeeded:
            log.info("Order already recorded for checkout session", order_number=order.order_number)
            return outcome

        log.warning(
            "Completing an interrupted checkout",
            order_number=order.order_number,
            product_ids=reservation.succeeded,
        )
        self._notify_order_placed(order, reservation.succeeded)
        return outcome

    def _place_order(self, session: CheckoutSessionDetail) -> tuple[str, bool]:
        """Issue PlaceOrder, tolerating a concurrent delivery of the same session.

        The store rejects a second order for the same session (or a clashing
        order number). After a rejection, an order now present for the session
        means another delivery won the race; otherwise the order number
        clashed and placement is retried once with a fresh number.

        Returns the order id and whether this call created it.
        """
        command = self._place_order_command(session)

        for attempt in (1, 2):
            try:
                return current_domain.process(command, asynchronous=False), True
            except (ValidationError, IntegrityError) as exc:
                existing = self._orders().find_by_session(session.session_id)
                if existing is not None:
                    logger.info(
                        "Concurrent delivery already recorded the order",
                        payment_session_id=session.session_id,
                        order_number=existing.order_number,
                    )
                    return str(existing.id), False
                if attempt == 2 or not _is_uniqueness_error(exc):
                    raise
                logger.warning(
                    "Order placement rejected by the store, retrying with a new order number",
                    payment_session_id=session.session_id,
                    error=str(exc),
                )

    def _place_order_command(self, session: CheckoutSessionDetail) -> PlaceOrder:
        products = {str(p.id): p for p in current_domain.repository_for(Product).find_many(session.product_ids)}

        items = []
        for product_id in session.product_ids:
            product = products.get(product_id)
            if product is None:
                logger.warning(
                    "Purchased product not found, recording placeholder line",
                    payment_session_id=session.session_id,
                    product_id=product_id,
                )
            items.append(
                {
                    "product_id": product_id,
                    "product_title": product.title if product else UNKNOWN_PRODUCT_TITLE,
                    "product_slug": product.slug if product else product_id,
                    "price": product.price if product else 0.0,
                    "quantity": 1,
                }
            )

        customer, address = session.customer, session.shipping_address
        return PlaceOrder(
            payment_session_id=session.session_id,
            payment_intent_id=session.payment_intent_id,
            user_id=session.user_id,
            customer=json.dumps(
                {
                    "name": customer.name,
                    "email": customer.email.strip().lower() if customer.email else None,
                    "phone": customer.phone,
                }
            ),
            shipping_address=json.dumps(
                {
                    "line1": address.line1,
                    "line2": address.line2,
                    "city": address.city,
                    "postal_code": address.postal_code,
                    "state": address.state,
                    "country": address.country,
                }
            ),
            items=json.dumps(items),
            subtotal=session.amount_subtotal,
            shipping_cost=session.amount_shipping,
            tax=session.amount_tax,
            total=session.amount_total,
            currency=session.currency,
            paid=session.is_paid,
        )

    def _load_settings(self):
        try:
            return self.settings_provider()
        except ConfigurationError as exc:
            logger.warning("Site settings unavailable, using notification defaults", error=str(exc))
            return None

    def _notify_order_placed(self, order, sold_product_ids):
        settings = self._load_settings()
        try:
            self.dispatcher.notify_order_placed(
                order,
                sold_product_ids,
                admin_email=admin_email_from(settings),
                send_confirmation=settings.order_confirmation_enabled if settings else True,
                notify_wishlists=settings.wishlist_notifications_enabled if settings else True,
            )
        except Exception as exc:
            logger.error("Order notifications failed", order_number=order.order_number, error=str(exc))

    # -------------------------------------------------------------------
    # Payment intent succeeded
    # -------------------------------------------------------------------
    def on_payment_succeeded(self, event: PaymentSucceeded) -> WebhookOutcome:
        order = self._orders().find_by_payment_intent(event.payment_intent_id)
        if order is None:
            logger.info("No order yet for payment intent", payment_intent_id=event.payment_intent_id)
            return WebhookOutcome(action=WebhookAction.IGNORED)

        if order.status != OrderStatus.PENDING.value:
            logger.info(
                "Order already past payment, nothing to promote",
                order_number=order.order_number,
                status=order.status,
            )
            return WebhookOutcome(action=WebhookAction.IGNORED, order_id=str(order.id))

        current_domain.process(RecordPayment(order_id=str(order.id)), asynchronous=False)
        logger.info("Order promoted to paid", order_number=order.order_number)
        return WebhookOutcome(action=WebhookAction.ORDER_PAID, order_id=str(order.id))

    # -------------------------------------------------------------------
    # Payment intent failed
    # -------------------------------------------------------------------
    def on_payment_failed(self, event: PaymentFailed) -> WebhookOutcome:
        order = self._orders().find_by_payment_intent(event.payment_intent_id)
        if order is None:
            logger.info("No order for failed payment intent", payment_intent_id=event.payment_intent_id)
            return WebhookOutcome(action=WebhookAction.IGNORED)

        status = OrderStatus(order.status)
        if status in (OrderStatus.CANCELLED, OrderStatus.DELIVERED):
            log = logger.warning if status == OrderStatus.DELIVERED else logger.info
            log(
                "Payment failure for a closed order, leaving it as is",
                order_number=order.order_number,
                status=status.value,
            )
            return WebhookOutcome(action=WebhookAction.IGNORED, order_id=str(order.id))

        current_domain.process(
            RecordPaymentFailure(order_id=str(order.id), reason=event.reason),
            asynchronous=False,
        )
        released = self.ledger.release_to_available(order.product_ids)
        logger.warning(
            "Order cancelled after payment failure",
            order_number=order.order_number,
            reason=event.reason,
            released_product_ids=released,
        )

        settings = self._load_settings()
        if released and (settings is None or settings.wishlist_notifications_enabled):
            try:
                self.dispatcher.notify_wishlists_available(released)
            except Exception as exc:
                logger.error("Back-in-stock notifications failed", order_number=order.order_number, error=str(exc))

        return WebhookOutcome(action=WebhookAction.ORDER_CANCELLED, order_id=str(order.id))


def _is_uniqueness_error(exc: Exception) -> bool:
    if isinstance(exc, IntegrityError):
        return True
    messages = getattr(exc, "messages", None) or {}
    return "order_number" in messages
