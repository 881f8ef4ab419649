"""Atelier domain: order fulfillment for a shop of one-of-a-kind antiques.

Every product is unique and sells exactly once. The domain turns completed
payment events into durable orders, marks the purchased pieces sold, prices
shipping, and drives orders through their admin-managed lifecycle.
"""

import structlog
from protean.domain import Domain

atelier = Domain(name="atelier")

logger = structlog.get_logger(__name__)
