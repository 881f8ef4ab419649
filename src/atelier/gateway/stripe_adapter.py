"""Stripe payment gateway adapter."""

import json

import stripe
import structlog
from protean.exceptions import ConfigurationError

from atelier.gateway.port import CheckoutSessionDetail, GatewayEvent, InvalidSignature, PaymentGateway
from atelier.gateway.translation import event_from_payload, session_detail_from

logger = structlog.get_logger(__name__)


class StripeGateway(PaymentGateway):
    def __init__(self, api_key: str | None, webhook_secret: str | None) -> None:
        if not api_key:
            raise ConfigurationError("STRIPE_SECRET_KEY is not configured")
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    def parse_event(self, payload: bytes, signature: str) -> GatewayEvent | None:
        if not self.webhook_secret:
            raise ConfigurationError("STRIPE_WEBHOOK_SECRET is not configured")

        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.warning("Webhook signature verification failed", error=str(e))
            raise InvalidSignature(str(e)) from e

        return event_from_payload(json.loads(payload))

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSessionDetail:
        session = stripe.checkout.Session.retrieve(session_id, api_key=self.api_key)
        return session_detail_from(session)
