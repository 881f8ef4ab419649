"""Read access to the site settings record.

The payment handler and the shipping preview receive a settings provider
(any zero-argument callable returning ``SiteSettings``) instead of reading
the record themselves. ``get_site_settings`` is the default provider.
"""

import os

import structlog
from protean.exceptions import ConfigurationError
from protean.utils.globals import current_domain

from atelier.settings.settings import SiteSettings
from atelier.shipping.calculator import ShippingSettings

logger = structlog.get_logger(__name__)


def get_site_settings() -> SiteSettings:
    """Return the stored settings record.

    Raises:
        ConfigurationError: if no settings record has been saved.
    """
    records = current_domain.repository_for(SiteSettings)._dao.query.all().items
    if not records:
        raise ConfigurationError("Site settings have not been configured")
    if len(records) > 1:
        logger.warning("Multiple site settings records found, using the first", count=len(records))
    return records[0]


def shipping_settings_from(settings: SiteSettings) -> ShippingSettings:
    """Project the shipping slice out of the settings record, validating it."""
    return ShippingSettings(
        free_shipping_threshold=settings.free_shipping_threshold,
        domestic_cost=settings.domestic_shipping_cost,
        international_cost=settings.international_shipping_cost,
        notes=settings.shipping_notes,
        notes_en=settings.shipping_notes_en,
    )


def admin_email_from(settings: SiteSettings | None) -> str | None:
    """Admin alert address: the settings value, else the ADMIN_EMAIL env var."""
    if settings is not None and settings.admin_notification_email:
        return settings.admin_notification_email
    return os.getenv("ADMIN_EMAIL") or None
