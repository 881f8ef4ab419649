import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before the domain is initialized."""
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ.setdefault("PAYMENT_GATEWAY", "fake")
    os.environ.setdefault("EMAIL_ADAPTER", "fake")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def atelier_bed():
    from atelier.domain import atelier

    from atelier.utils.db import drop_db, setup_db

    bed = DomainFixture(atelier)
    bed.setup()
    setup_db(atelier)
    yield bed
    drop_db(atelier)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(atelier_bed):
    with atelier_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(_ctx):
    """Reset adapters and clear stored data after every test."""
    from atelier.gateway import reset_gateway
    from atelier.notification.channel import reset_channels

    reset_gateway()
    reset_channels()

    yield

    from protean import current_domain

    reset_gateway()
    reset_channels()

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def email():
    """The in-memory email adapter, installed as the active channel."""
    from atelier.notification.channel import set_email_channel
    from atelier.notification.channel.fake_email import FakeEmailAdapter

    adapter = FakeEmailAdapter()
    set_email_channel(adapter)
    return adapter


@pytest.fixture
def gateway():
    """The fake payment gateway, installed as the active gateway."""
    from atelier.gateway import set_gateway
    from atelier.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)
    return fake


@pytest.fixture
def make_product():
    from protean import current_domain

    from atelier.product.product import Product

    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        fields = {
            "title": f"Walnut Cabinet {counter['n']}",
            "slug": f"walnut-cabinet-{counter['n']}",
            "price": 240.0,
        }
        fields.update(overrides)
        product = Product(**fields)
        current_domain.repository_for(Product).add(product)
        return product

    return _make


@pytest.fixture
def site_settings():
    from protean import current_domain

    from atelier.settings.settings import SiteSettings

    settings = SiteSettings(
        free_shipping_threshold=500.0,
        domestic_shipping_cost=50.0,
        international_shipping_cost=150.0,
        shipping_notes="Spedizione assicurata",
        shipping_notes_en="Insured shipping",
        admin_notification_email="owner@atelier.test",
    )
    current_domain.repository_for(SiteSettings).add(settings)
    return settings


@pytest.fixture
def checkout_session():
    """Build a provider-shaped completed checkout session dict."""

    def _build(session_id, product_ids, subtotal_cents=24000, shipping_cents=5000, tax_cents=0, **overrides):
        session = {
            "id": session_id,
            "object": "checkout.session",
            "payment_status": "paid",
            "payment_intent": f"pi_{session_id}",
            "amount_subtotal": subtotal_cents,
            "amount_total": subtotal_cents + shipping_cents + tax_cents,
            "shipping_cost": {"amount_total": shipping_cents},
            "total_details": {"amount_tax": tax_cents},
            "currency": "eur",
            "customer_details": {
                "name": "Giulia Conti",
                "email": "Giulia.Conti@example.com",
                "phone": "+39 055 123456",
            },
            "shipping_details": {
                "name": "Giulia Conti",
                "address": {
                    "line1": "Via dei Servi 12",
                    "line2": None,
                    "city": "Firenze",
                    "postal_code": "50122",
                    "state": "FI",
                    "country": "IT",
                },
            },
            "metadata": {"userId": "user-giulia", "productIds": ",".join(product_ids)},
        }
        session.update(overrides)
        return session

    return _build


@pytest.fixture
def place_order(make_product):
    """Record an order directly through the placement command."""
    import json

    from protean import current_domain

    from atelier.order.order import Order
    from atelier.order.placement import PlaceOrder

    counter = {"n": 0}

    def _place(products=None, paid=True, email="giulia.conti@example.com", user_id="user-giulia", **overrides):
        counter["n"] += 1
        products = products if products is not None else [make_product()]
        subtotal = sum(p.price for p in products)
        fields = {
            "payment_session_id": f"cs_test_{counter['n']}",
            "payment_intent_id": f"pi_test_{counter['n']}",
            "user_id": user_id,
            "customer": json.dumps({"name": "Giulia Conti", "email": email, "phone": "+39 055 123456"}),
            "shipping_address": json.dumps(
                {"line1": "Via dei Servi 12", "city": "Firenze", "postal_code": "50122", "country": "IT"}
            ),
            "items": json.dumps(
                [
                    {"product_id": str(p.id), "product_title": p.title, "product_slug": p.slug, "price": p.price}
                    for p in products
                ]
            ),
            "subtotal": subtotal,
            "shipping_cost": 50.0,
            "total": subtotal + 50.0,
            "paid": paid,
        }
        fields.update(overrides)
        order_id = current_domain.process(PlaceOrder(**fields), asynchronous=False)
        return current_domain.repository_for(Order).get(order_id)

    return _place
