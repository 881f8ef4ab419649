"""Integration tests for the shipping preview endpoint."""


def test_domestic_quote_with_override_and_notes(client, site_settings, make_product):
    cabinet = make_product(shipping_cost=90.0, requires_special_shipping=True, shipping_note="Consegna su appuntamento")
    lamp = make_product(shipping_cost=40.0)

    response = client.post(
        "/shipping/quote",
        json={"items": [{"product_id": cabinet.id}, {"product_id": lamp.id}], "subtotal": 480.0},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["available"] is True
    assert data["cost"] == 90.0
    assert data["is_free"] is False
    assert data["amount_to_free_shipping"] == 20.0
    assert data["has_special_shipping_items"] is True
    assert data["item_notes"] == ["Consegna su appuntamento"]
    assert data["general_notes"] == "Spedizione assicurata"


def test_international_quote_in_english(client, site_settings, make_product):
    lamp = make_product(shipping_note_en="Fragile glass")

    response = client.post(
        "/shipping/quote",
        json={
            "items": [{"product_id": lamp.id}],
            "subtotal": 240.0,
            "destination": "international",
            "locale": "en",
        },
    )

    data = response.json()
    assert data["cost"] == 150.0
    assert data["item_notes"] == ["Fragile glass"]
    assert data["general_notes"] == "Insured shipping"


def test_over_threshold_is_free(client, site_settings, make_product):
    product = make_product(shipping_cost=300.0)

    response = client.post("/shipping/quote", json={"items": [{"product_id": product.id}], "subtotal": 600.0})

    assert response.json()["cost"] == 0.0
    assert response.json()["is_free"] is True


def test_unknown_product_uses_defaults(client, site_settings):
    response = client.post("/shipping/quote", json={"items": [{"product_id": "gone"}], "subtotal": 100.0})

    assert response.status_code == 200
    assert response.json()["cost"] == 50.0


def test_unavailable_without_settings(client, make_product):
    product = make_product()

    response = client.post("/shipping/quote", json={"items": [{"product_id": product.id}], "subtotal": 100.0})

    assert response.status_code == 200
    assert response.json()["available"] is False
    assert response.json()["cost"] is None


def test_unknown_destination_is_422(client, site_settings):
    response = client.post("/shipping/quote", json={"items": [], "subtotal": 0.0, "destination": "moon"})

    assert response.status_code == 422
