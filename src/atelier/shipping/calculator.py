"""Shipping cost calculation for carts and orders.

Pure functions over plain values: no repository access and no ambient
settings. Callers load ``ShippingSettings`` (see ``atelier.settings``) and
pass it in.

Rules, in order of precedence:
    1. An empty cart ships for free.
    2. A subtotal at or above the free-shipping threshold ships for free,
       whatever the items' overrides say.
    3. Otherwise the destination's global cost is the floor, and the most
       expensive per-item override for that destination wins above it. The
       result is one cost for the whole order, never a per-item sum.

The floor in rule 3 means an override cheaper than the global cost never
lowers the charge. That reading is pending confirmation by the shop owner;
if overrides should also be able to undercut the global cost, only
``compute_shipping_cost`` and the "override below default" cases change.
"""

from dataclasses import dataclass, field
from enum import Enum

from protean.exceptions import ConfigurationError

DEFAULT_LOCALE = "it"


class Destination(Enum):
    DOMESTIC = "domestic"
    INTERNATIONAL = "international"


@dataclass(frozen=True)
class ShippingSettings:
    """Global shipping configuration, validated on construction."""

    free_shipping_threshold: float
    domestic_cost: float
    international_cost: float
    notes: str | None = None
    notes_en: str | None = None

    def __post_init__(self):
        for name in ("free_shipping_threshold", "domestic_cost", "international_cost"):
            value = getattr(self, name)
            if value is None:
                raise ConfigurationError(f"Shipping setting '{name}' is missing")
            if isinstance(value, bool) or not isinstance(value, int | float):
                raise ConfigurationError(f"Shipping setting '{name}' must be a number, got {value!r}")
            if value < 0:
                raise ConfigurationError(f"Shipping setting '{name}' must not be negative, got {value}")

    def base_cost(self, destination: Destination) -> float:
        if destination == Destination.INTERNATIONAL:
            return self.international_cost
        return self.domestic_cost

    def general_notes(self, locale: str = DEFAULT_LOCALE) -> str | None:
        return self.notes_en if locale == "en" else self.notes


@dataclass(frozen=True)
class ShippableItem:
    """The shipping-relevant slice of a cart line."""

    product_id: str
    shipping_cost: float | None = None
    shipping_cost_intl: float | None = None
    requires_special_shipping: bool = False
    shipping_note: str | None = None
    shipping_note_en: str | None = None

    @classmethod
    def from_product(cls, product) -> "ShippableItem":
        return cls(
            product_id=str(product.id),
            shipping_cost=product.shipping_cost,
            shipping_cost_intl=product.shipping_cost_intl,
            requires_special_shipping=bool(product.requires_special_shipping),
            shipping_note=product.shipping_note,
            shipping_note_en=product.shipping_note_en,
        )

    def override_for(self, destination: Destination) -> float | None:
        if destination == Destination.INTERNATIONAL:
            return self.shipping_cost_intl
        return self.shipping_cost

    def note_for(self, locale: str = DEFAULT_LOCALE) -> str | None:
        return self.shipping_note_en if locale == "en" else self.shipping_note


@dataclass(frozen=True)
class ShippingQuote:
    cost: float
    destination: Destination
    is_free: bool
    amount_to_free_shipping: float
    has_special_shipping_items: bool
    item_notes: list[str] = field(default_factory=list)
    general_notes: str | None = None


def _as_destination(destination: Destination | str) -> Destination:
    if isinstance(destination, Destination):
        return destination
    try:
        return Destination(str(destination).lower())
    except ValueError:
        raise ValueError(f"Unknown shipping destination: {destination!r}") from None


def is_free_shipping(subtotal: float, settings: ShippingSettings) -> bool:
    return subtotal >= settings.free_shipping_threshold


def compute_shipping_cost(
    items: list[ShippableItem],
    subtotal: float,
    destination: Destination | str,
    settings: ShippingSettings,
) -> float:
    """Return the single shipping charge for a cart."""
    destination = _as_destination(destination)

    if not items:
        return 0.0
    if is_free_shipping(subtotal, settings):
        return 0.0

    costs = [settings.base_cost(destination)]
    costs.extend(
        override for override in (item.override_for(destination) for item in items) if override is not None
    )
    return float(max(costs))


def has_special_shipping_items(items: list[ShippableItem]) -> bool:
    return any(item.requires_special_shipping for item in items)


def cart_shipping_notes(items: list[ShippableItem], locale: str = DEFAULT_LOCALE) -> list[str]:
    """Distinct, non-empty per-item notes in cart order."""
    notes: list[str] = []
    for item in items:
        note = (item.note_for(locale) or "").strip()
        if note and note not in notes:
            notes.append(note)
    return notes


def quote_shipping(
    items: list[ShippableItem],
    subtotal: float,
    destination: Destination | str,
    settings: ShippingSettings,
    locale: str = DEFAULT_LOCALE,
) -> ShippingQuote:
    """Shipping cost plus the advisory information shown next to it in the cart."""
    destination = _as_destination(destination)
    cost = compute_shipping_cost(items, subtotal, destination, settings)

    return ShippingQuote(
        cost=cost,
        destination=destination,
        is_free=cost == 0.0,
        amount_to_free_shipping=round(max(settings.free_shipping_threshold - subtotal, 0.0), 2),
        has_special_shipping_items=has_special_shipping_items(items),
        item_notes=cart_shipping_notes(items, locale),
        general_notes=settings.general_notes(locale),
    )
