"""Payment gateway port (abstract interface) and the internal event types.

Provider payloads never travel past the gateway adapter. ``parse_event``
verifies the signature and translates the provider event into one of the
small frozen dataclasses below; everything downstream works with those.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CheckoutCompleted:
    session_id: str


@dataclass(frozen=True)
class PaymentSucceeded:
    payment_intent_id: str


@dataclass(frozen=True)
class PaymentFailed:
    payment_intent_id: str
    reason: str | None = None


GatewayEvent = CheckoutCompleted | PaymentSucceeded | PaymentFailed


@dataclass(frozen=True)
class CustomerDetails:
    name: str | None = None
    email: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class AddressDetails:
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    postal_code: str | None = None
    state: str | None = None
    country: str | None = None


@dataclass(frozen=True)
class CheckoutSessionDetail:
    """Everything the order needs from a completed checkout session.

    Amounts are in major currency units (euros, not cents).
    """

    session_id: str
    payment_status: str
    amount_subtotal: float
    amount_total: float
    amount_shipping: float = 0.0
    amount_tax: float = 0.0
    currency: str = "EUR"
    payment_intent_id: str | None = None
    customer: CustomerDetails = field(default_factory=CustomerDetails)
    shipping_address: AddressDetails = field(default_factory=AddressDetails)
    user_id: str | None = None
    product_ids: list[str] = field(default_factory=list)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"


class InvalidSignature(Exception):
    """The webhook payload could not be authenticated."""


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def parse_event(self, payload: bytes, signature: str) -> GatewayEvent | None:
        """Verify and translate an inbound webhook.

        Returns None for event types the engine does not handle.

        Raises:
            InvalidSignature: if the signature does not match the payload.
            ConfigurationError: if no webhook secret is configured.
        """
        ...

    @abstractmethod
    def retrieve_checkout_session(self, session_id: str) -> CheckoutSessionDetail:
        """Fetch the full detail of a checkout session from the provider."""
        ...
