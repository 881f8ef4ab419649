from enum import Enum


class NotificationKind(Enum):
    ORDER_CONFIRMATION = "order_confirmation"
    ADMIN_NEW_ORDER = "admin_new_order"
    SHIPMENT_NOTICE = "shipment_notice"
    WISHLIST_SOLD = "wishlist_sold"
    BACK_IN_STOCK = "back_in_stock"
