"""Translation of Stripe-shaped payloads into the internal gateway types.

Works on anything indexable by key: parsed JSON dicts and stripe SDK
objects alike. Amounts arrive in minor units (cents) and leave in major
units.
"""

import structlog

from atelier.gateway.port import (
    AddressDetails,
    CheckoutCompleted,
    CheckoutSessionDetail,
    CustomerDetails,
    GatewayEvent,
    PaymentFailed,
    PaymentSucceeded,
)

logger = structlog.get_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"

# Storefront writes this userId for checkouts without an account
GUEST_USER_ID = "guest"


def _get(obj, key, default=None):
    if obj is None:
        return default
    try:
        value = obj[key]
    except (KeyError, TypeError, IndexError):
        return default
    return default if value is None else value


def _id_of(value) -> str | None:
    """Expanded objects carry their id; unexpanded references are the id."""
    if value is None or isinstance(value, str):
        return value
    return _get(value, "id")


def _user_id(value) -> str | None:
    if not value or value == GUEST_USER_ID:
        return None
    return value


def _major_units(cents) -> float:
    return round((cents or 0) / 100, 2)


def event_from_payload(event) -> GatewayEvent | None:
    """Map a provider event onto an internal event, or None if it is not handled."""
    event_type = _get(event, "type")
    obj = _get(_get(event, "data"), "object")
    object_id = _get(obj, "id")

    if event_type not in (CHECKOUT_COMPLETED, PAYMENT_SUCCEEDED, PAYMENT_FAILED):
        logger.info("Unhandled payment event type", event_type=event_type, event_id=_get(event, "id"))
        return None
    if not object_id:
        logger.warning("Payment event without object id", event_type=event_type, event_id=_get(event, "id"))
        return None

    if event_type == CHECKOUT_COMPLETED:
        return CheckoutCompleted(session_id=object_id)
    if event_type == PAYMENT_SUCCEEDED:
        return PaymentSucceeded(payment_intent_id=object_id)

    reason = _get(_get(obj, "last_payment_error"), "message")
    return PaymentFailed(payment_intent_id=object_id, reason=reason)


def session_detail_from(session) -> CheckoutSessionDetail:
    customer = _get(session, "customer_details")
    shipping = _get(session, "shipping_details") or _get(_get(session, "collected_information"), "shipping_details")
    address = _get(shipping, "address")
    metadata = _get(session, "metadata")

    product_ids = [pid.strip() for pid in (_get(metadata, "productIds") or "").split(",") if pid.strip()]

    return CheckoutSessionDetail(
        session_id=_get(session, "id"),
        payment_status=_get(session, "payment_status", "unpaid"),
        payment_intent_id=_id_of(_get(session, "payment_intent")),
        amount_subtotal=_major_units(_get(session, "amount_subtotal")),
        amount_total=_major_units(_get(session, "amount_total")),
        amount_shipping=_major_units(_get(_get(session, "shipping_cost"), "amount_total")),
        amount_tax=_major_units(_get(_get(session, "total_details"), "amount_tax")),
        currency=str(_get(session, "currency", "eur")).upper(),
        customer=CustomerDetails(
            name=_get(shipping, "name") or _get(customer, "name"),
            email=_get(customer, "email"),
            phone=_get(customer, "phone"),
        ),
        shipping_address=AddressDetails(
            line1=_get(address, "line1"),
            line2=_get(address, "line2"),
            city=_get(address, "city"),
            postal_code=_get(address, "postal_code"),
            state=_get(address, "state"),
            country=_get(address, "country"),
        ),
        user_id=_user_id(_get(metadata, "userId")),
        product_ids=product_ids,
    )
