"""FastAPI endpoints for order administration, tracking, shipping and payments."""

import structlog
from fastapi import APIRouter, Header, HTTPException, Query, Request
from protean.exceptions import ConfigurationError
from protean.utils.globals import current_domain

from atelier.api.schemas import (
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
    ResendNotificationRequest,
    ResendNotificationResponse,
    ShippingQuoteRequest,
    ShippingQuoteResponse,
    TrackedOrderResponse,
    TrackOrderRequest,
    UpdateOrderRequest,
    UpdateOrderResponse,
    WebhookAckResponse,
)
from atelier.gateway import get_gateway
from atelier.gateway.port import InvalidSignature
from atelier.notification.dispatcher import NotificationDispatcher
from atelier.order import lookup
from atelier.order.admin import OrderAdminController, TrackingDetails
from atelier.order.repository import DEFAULT_PAGE_SIZE
from atelier.payment.handler import PaymentEventHandler
from atelier.product.ledger import InventoryLedger
from atelier.product.product import Product
from atelier.settings.provider import get_site_settings, shipping_settings_from
from atelier.shipping.calculator import ShippableItem, quote_shipping

logger = structlog.get_logger(__name__)

order_router = APIRouter(prefix="/orders", tags=["orders"])
shipping_router = APIRouter(prefix="/shipping", tags=["shipping"])
webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def _admin() -> OrderAdminController:
    return OrderAdminController(dispatcher=NotificationDispatcher())


def _payment_handler() -> PaymentEventHandler:
    return PaymentEventHandler(
        gateway=get_gateway(),
        ledger=InventoryLedger(),
        dispatcher=NotificationDispatcher(),
        settings_provider=get_site_settings,
    )


def _order_response(order) -> OrderResponse:
    customer, address = order.customer, order.shipping_address
    return OrderResponse(
        id=str(order.id),
        order_number=order.order_number,
        status=order.status,
        user_id=str(order.user_id) if order.user_id else None,
        subtotal=order.pricing.subtotal,
        shipping_cost=order.pricing.shipping_cost,
        tax=order.pricing.tax,
        total=order.pricing.total,
        currency=order.pricing.currency,
        payment_session_id=order.payment_session_id,
        payment_intent_id=order.payment_intent_id,
        customer=customer.to_dict() if customer else None,
        shipping_address=address.to_dict() if address else None,
        carrier_name=order.carrier_name,
        tracking_number=order.tracking_number,
        tracking_url=order.tracking_url,
        internal_notes=order.internal_notes,
        cancelled_by=order.cancelled_by,
        created_at=order.created_at,
        paid_at=order.paid_at,
        shipped_at=order.shipped_at,
        updated_at=order.updated_at,
        items=[
            OrderItemResponse(
                id=str(item.id),
                product_id=str(item.product_id),
                product_title=item.product_title,
                product_slug=item.product_slug,
                price=item.price,
                quantity=item.quantity,
            )
            for item in order.items
        ],
    )


# --- Admin order endpoints ---


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    status: str | None = None,
    user_id: str | None = None,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> OrderListResponse:
    results = _admin().list_orders(status=status, user_id=user_id, limit=limit, offset=offset)
    return OrderListResponse(
        orders=[_order_response(order) for order in results.items],
        total=results.total,
        limit=limit,
        offset=offset,
    )


@order_router.post("/track", response_model=TrackedOrderResponse)
async def track_order(body: TrackOrderRequest) -> TrackedOrderResponse:
    """Public order tracking. Any mismatch is the same 404."""
    order = lookup.find_by_order_number_and_email(body.order_number, body.email)
    return TrackedOrderResponse(**lookup.summarize(order))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return _order_response(_admin().get_order(order_id))


@order_router.put("/{order_id}", response_model=UpdateOrderResponse)
async def update_order(order_id: str, body: UpdateOrderRequest) -> UpdateOrderResponse:
    tracking = TrackingDetails(
        carrier_name=body.carrier_name,
        tracking_number=body.tracking_number,
        tracking_url=body.tracking_url,
    )
    result = _admin().update_order(
        order_id,
        status=body.status,
        tracking=tracking,
        internal_notes=body.internal_notes,
        notify=body.notify_customer,
    )
    return UpdateOrderResponse(
        order=_order_response(result.order),
        notification_sent=result.notification.sent if result.notification else None,
    )


@order_router.post("/{order_id}/resend-notification", response_model=ResendNotificationResponse)
async def resend_notification(order_id: str, body: ResendNotificationRequest) -> ResendNotificationResponse:
    outcome = _admin().resend_shipment_notification(
        order_id,
        tracking_override=TrackingDetails(
            carrier_name=body.carrier_name,
            tracking_number=body.tracking_number,
            tracking_url=body.tracking_url,
        ),
        persist_override=body.update_tracking,
    )
    if not outcome.sent:
        raise HTTPException(status_code=502, detail=f"Failed to send notification: {outcome.error}")
    return ResendNotificationResponse(success=True, recipient=outcome.recipient, message_id=outcome.message_id)


# --- Storefront shipping preview ---


@shipping_router.post("/quote", response_model=ShippingQuoteResponse)
async def shipping_quote(body: ShippingQuoteRequest) -> ShippingQuoteResponse:
    """Live shipping preview for the cart. Never persists anything."""
    try:
        settings = shipping_settings_from(get_site_settings())
    except ConfigurationError as exc:
        logger.warning("Shipping preview unavailable", error=str(exc))
        return ShippingQuoteResponse(available=False)

    product_ids = [item.product_id for item in body.items]
    products = {str(p.id): p for p in current_domain.repository_for(Product).find_many(product_ids)}
    items = [
        ShippableItem.from_product(products[pid]) if pid in products else ShippableItem(product_id=pid)
        for pid in product_ids
    ]

    quote = quote_shipping(items, body.subtotal, body.destination, settings, locale=body.locale)
    return ShippingQuoteResponse(
        available=True,
        cost=quote.cost,
        is_free=quote.is_free,
        amount_to_free_shipping=quote.amount_to_free_shipping,
        has_special_shipping_items=quote.has_special_shipping_items,
        item_notes=quote.item_notes,
        general_notes=quote.general_notes,
    )


# --- Payment provider webhook ---


@webhook_router.post("/payments", response_model=WebhookAckResponse)
async def payment_webhook(request: Request, stripe_signature: str = Header(default="")) -> WebhookAckResponse:
    """Acknowledge once the order and inventory changes are stored.

    Notification outcomes never change the response. Anything that prevents
    the durable part from completing surfaces as an error so the provider
    redelivers the event.
    """
    if not stripe_signature:
        raise HTTPException(status_code=400, detail="Missing webhook signature")

    payload = await request.body()
    try:
        event = get_gateway().parse_event(payload, stripe_signature)
    except InvalidSignature:
        raise HTTPException(status_code=400, detail="Invalid webhook signature") from None
    except ConfigurationError as exc:
        logger.error("Payment webhook misconfigured", error=str(exc))
        raise HTTPException(status_code=500, detail="Webhook not configured") from None

    if event is None:
        return WebhookAckResponse(action="ignored")

    outcome = _payment_handler().handle(event)
    return WebhookAckResponse(action=outcome.action.value)
