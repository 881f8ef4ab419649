import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean.integrations.fastapi import register_exception_handlers

from atelier.api import order_router, shipping_router, webhook_router


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(order_router)
    app.include_router(shipping_router)
    app.include_router(webhook_router)
    register_exception_handlers(app)
    return TestClient(app)
