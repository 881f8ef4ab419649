"""WishlistItem aggregate: a customer's interest in one piece."""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Identifier, String

from atelier.domain import atelier


@atelier.aggregate
class WishlistItem:
    """A customer's wishlist entry with its notification flags.

    ``notified_sold`` and ``notified_available`` record that the matching
    notice went out. Each is claimed atomically by the repository before the
    email is sent, so a notice is sent at most once per entry.
    """

    user_id: Identifier(required=True)
    user_email: String(required=True, max_length=254)
    user_name: String(max_length=255)
    product_id: Identifier(required=True)
    notify_on_sale: Boolean(default=True)
    notified_sold: Boolean(default=False)
    notify_on_available: Boolean(default=False)
    notified_available: Boolean(default=False)
    created_at: DateTime(default=lambda: datetime.now(UTC))
