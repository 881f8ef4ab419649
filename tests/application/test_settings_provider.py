import pytest
from protean import current_domain
from protean.exceptions import ConfigurationError

from atelier.settings.provider import admin_email_from, get_site_settings, shipping_settings_from
from atelier.settings.settings import SiteSettings


def test_missing_settings_raise():
    with pytest.raises(ConfigurationError):
        get_site_settings()


def test_returns_stored_record(site_settings):
    assert get_site_settings().id == site_settings.id


def test_defaults_when_saved_empty():
    current_domain.repository_for(SiteSettings).add(SiteSettings())

    settings = get_site_settings()

    assert settings.free_shipping_threshold == 500.0
    assert settings.domestic_shipping_cost == 50.0
    assert settings.international_shipping_cost == 150.0
    assert settings.order_confirmation_enabled is True


def test_shipping_projection(site_settings):
    shipping = shipping_settings_from(site_settings)

    assert shipping.free_shipping_threshold == 500.0
    assert shipping.general_notes("en") == "Insured shipping"


def test_negative_cost_rejected(site_settings):
    site_settings.domestic_shipping_cost = -5.0

    with pytest.raises(ConfigurationError):
        shipping_settings_from(site_settings)


class TestAdminEmail:
    def test_settings_value_wins(self, site_settings, monkeypatch):
        monkeypatch.setenv("ADMIN_EMAIL", "fallback@atelier.test")

        assert admin_email_from(site_settings) == "owner@atelier.test"

    def test_environment_fallback(self, monkeypatch):
        monkeypatch.setenv("ADMIN_EMAIL", "fallback@atelier.test")

        assert admin_email_from(None) == "fallback@atelier.test"

    def test_none_when_unset(self, monkeypatch):
        monkeypatch.delenv("ADMIN_EMAIL", raising=False)

        assert admin_email_from(None) is None
