"""Atelier API package."""

from atelier.api.routes import order_router, shipping_router, webhook_router

__all__ = ["order_router", "shipping_router", "webhook_router"]
