"""Fake payment gateway for development and testing.

Webhooks are plain JSON in the provider's event shape, authenticated by a
fixed signature. Checkout sessions are registered up front with
``add_session`` (also in the provider's shape) and served back from memory.
"""

import json

from protean.exceptions import ObjectNotFoundError

from atelier.gateway.port import CheckoutSessionDetail, GatewayEvent, InvalidSignature, PaymentGateway
from atelier.gateway.translation import event_from_payload, session_detail_from

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.sessions: dict[str, dict] = {}
        self.calls: list[dict] = []

    def add_session(self, session: dict) -> None:
        self.sessions[session["id"]] = session

    def parse_event(self, payload: bytes, signature: str) -> GatewayEvent | None:
        self.calls.append({"method": "parse_event", "signature": signature})
        if signature != TEST_SIGNATURE:
            raise InvalidSignature("Signature does not match payload")
        return event_from_payload(json.loads(payload))

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSessionDetail:
        self.calls.append({"method": "retrieve_checkout_session", "session_id": session_id})
        try:
            return session_detail_from(self.sessions[session_id])
        except KeyError:
            raise ObjectNotFoundError(f"Checkout session {session_id} not found") from None
