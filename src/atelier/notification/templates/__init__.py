"""Template registry: maps notification kinds to template classes."""

from atelier.notification.kinds import NotificationKind
from atelier.notification.templates.admin_new_order import AdminNewOrderTemplate
from atelier.notification.templates.back_in_stock import BackInStockTemplate
from atelier.notification.templates.order_confirmation import OrderConfirmationTemplate
from atelier.notification.templates.shipment_notice import ShipmentNoticeTemplate
from atelier.notification.templates.wishlist_sold import WishlistSoldTemplate

TEMPLATE_REGISTRY: dict[NotificationKind, type] = {
    NotificationKind.ORDER_CONFIRMATION: OrderConfirmationTemplate,
    NotificationKind.ADMIN_NEW_ORDER: AdminNewOrderTemplate,
    NotificationKind.SHIPMENT_NOTICE: ShipmentNoticeTemplate,
    NotificationKind.WISHLIST_SOLD: WishlistSoldTemplate,
    NotificationKind.BACK_IN_STOCK: BackInStockTemplate,
}


def get_template(kind: NotificationKind):
    """Look up a template class by notification kind."""
    template_cls = TEMPLATE_REGISTRY.get(kind)
    if template_cls is None:
        raise ValueError(f"No template registered for notification kind: {kind}")
    return template_cls
