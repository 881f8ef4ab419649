"""Pydantic request/response schemas for the atelier API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# --- Shared ---


class TrackingFields(BaseModel):
    carrier_name: str | None = Field(None, max_length=100)
    tracking_number: str | None = Field(None, max_length=255)
    tracking_url: str | None = Field(None, max_length=500)


# --- Admin order schemas ---


class OrderItemResponse(BaseModel):
    id: str
    product_id: str
    product_title: str
    product_slug: str
    price: float
    quantity: int


class CustomerResponse(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None


class AddressResponse(BaseModel):
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    postal_code: str | None = None
    state: str | None = None
    country: str | None = None


class OrderResponse(BaseModel):
    id: str
    order_number: str
    status: str
    user_id: str | None = None
    subtotal: float
    shipping_cost: float
    tax: float
    total: float
    currency: str
    payment_session_id: str
    payment_intent_id: str | None = None
    customer: CustomerResponse | None = None
    shipping_address: AddressResponse | None = None
    carrier_name: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None
    internal_notes: str | None = None
    cancelled_by: str | None = None
    created_at: datetime | None = None
    paid_at: datetime | None = None
    shipped_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[OrderItemResponse] = []


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    total: int
    limit: int
    offset: int


class UpdateOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "status": "SHIPPED",
                    "carrier_name": "BRT",
                    "tracking_number": "BRT123456789",
                    "tracking_url": "https://tracking.example.com/BRT123456789",
                    "notify_customer": True,
                }
            ]
        }
    }

    status: str | None = Field(None, max_length=20)
    carrier_name: str | None = Field(None, max_length=100)
    tracking_number: str | None = Field(None, max_length=255)
    tracking_url: str | None = Field(None, max_length=500)
    internal_notes: str | None = None
    notify_customer: bool = False


class UpdateOrderResponse(BaseModel):
    order: OrderResponse
    notification_sent: bool | None = None


class ResendNotificationRequest(TrackingFields):
    update_tracking: bool = False


class ResendNotificationResponse(BaseModel):
    success: bool
    recipient: str | None = None
    message_id: str | None = None


# --- Public tracking ---


class TrackOrderRequest(BaseModel):
    order_number: str = Field(..., max_length=50)
    email: str = Field(..., max_length=254)


class TrackedItemResponse(BaseModel):
    product_id: str
    product_title: str
    product_slug: str
    price: float
    quantity: int


class TrackedOrderResponse(BaseModel):
    id: str
    order_number: str
    status: str
    subtotal: float
    shipping_cost: float
    tax: float
    total: float
    currency: str
    shipping_name: str | None = None
    shipping_address: str | None = None
    shipping_city: str | None = None
    shipping_postal_code: str | None = None
    shipping_country: str | None = None
    carrier_name: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None
    created_at: datetime | None = None
    paid_at: datetime | None = None
    shipped_at: datetime | None = None
    items: list[TrackedItemResponse] = []


# --- Storefront shipping preview ---


class CartItemRequest(BaseModel):
    product_id: str


class ShippingQuoteRequest(BaseModel):
    items: list[CartItemRequest]
    subtotal: float = Field(..., ge=0)
    destination: str = Field("domestic", pattern="^(domestic|international)$")
    locale: str = Field("it", pattern="^(it|en)$")


class ShippingQuoteResponse(BaseModel):
    available: bool
    cost: float | None = None
    is_free: bool | None = None
    amount_to_free_shipping: float | None = None
    has_special_shipping_items: bool = False
    item_notes: list[str] = []
    general_notes: str | None = None


# --- Webhook ---


class WebhookAckResponse(BaseModel):
    received: bool = True
    action: str | None = None
