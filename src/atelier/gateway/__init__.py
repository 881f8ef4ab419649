"""Payment gateway factory.

``PAYMENT_GATEWAY`` picks the adapter on first use:
- ``fake`` (default) for development and testing
- ``stripe`` for production; needs STRIPE_SECRET_KEY and STRIPE_WEBHOOK_SECRET
"""

import os

from atelier.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def _build_gateway() -> PaymentGateway:
    name = os.getenv("PAYMENT_GATEWAY", "fake").lower()
    if name == "fake":
        from atelier.gateway.fake_adapter import FakeGateway

        return FakeGateway()
    if name == "stripe":
        from atelier.gateway.stripe_adapter import StripeGateway

        return StripeGateway(
            api_key=os.getenv("STRIPE_SECRET_KEY"),
            webhook_secret=os.getenv("STRIPE_WEBHOOK_SECRET"),
        )
    raise ValueError(f"Unknown payment gateway: {name}")


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
