"""SiteSettings aggregate: the single store-wide configuration record."""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Float, String, Text

from atelier.domain import atelier


@atelier.aggregate
class SiteSettings:
    """Store-wide shipping defaults and notification switches.

    Exactly one record is expected. It is edited outside the fulfillment
    engine and read here through ``get_site_settings``.
    """

    free_shipping_threshold: Float(default=500.0)
    domestic_shipping_cost: Float(default=50.0)
    international_shipping_cost: Float(default=150.0)
    shipping_notes: Text()
    shipping_notes_en: Text()
    admin_notification_email: String(max_length=254)
    order_confirmation_enabled: Boolean(default=True)
    wishlist_notifications_enabled: Boolean(default=True)
    updated_at: DateTime(default=lambda: datetime.now(UTC))
