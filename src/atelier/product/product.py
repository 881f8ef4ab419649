"""Product aggregate: the availability slice of a catalogue piece.

Catalogue editing lives elsewhere. The fulfillment engine only cares about
whether a piece can still be sold, when it sold, and how it ships.
"""

from enum import Enum

from protean.fields import Boolean, DateTime, Float, String, Text

from atelier.domain import atelier


class ProductStatus(Enum):
    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    SOLD = "SOLD"
    COMING_SOON = "COMING_SOON"


# Every status a piece can be sold from
SELLABLE_STATUSES = [
    ProductStatus.AVAILABLE.value,
    ProductStatus.RESERVED.value,
    ProductStatus.COMING_SOON.value,
]


@atelier.aggregate
class Product:
    title: String(required=True, max_length=255)
    slug: String(required=True, max_length=255)
    price: Float(required=True, min_value=0.0)
    status: String(choices=ProductStatus, default=ProductStatus.AVAILABLE.value)
    sold_at: DateTime()

    # Per-piece shipping overrides; None means "use the global default"
    shipping_cost: Float(min_value=0.0)
    shipping_cost_intl: Float(min_value=0.0)
    requires_special_shipping: Boolean(default=False)
    shipping_note: Text()
    shipping_note_en: Text()
