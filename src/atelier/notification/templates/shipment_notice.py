"""Shipment notice: sent when an order leaves, and on admin resend."""

from atelier.notification.kinds import NotificationKind


class ShipmentNoticeTemplate:
    kind = NotificationKind.SHIPMENT_NOTICE

    @staticmethod
    def render(context: dict) -> dict:
        tracking = []
        if context.get("carrier_name"):
            tracking.append(f"Carrier: {context['carrier_name']}")
        if context.get("tracking_number"):
            tracking.append(f"Tracking number: {context['tracking_number']}")
        if context.get("tracking_url"):
            tracking.append(f"Track your parcel: {context['tracking_url']}")
        tracking_block = "\n".join(tracking) or "Tracking details will follow."

        return {
            "subject": f"Your order {context['order_number']} has shipped",
            "body": (
                f"Dear {context.get('customer_name') or 'customer'},\n\n"
                f"Your order {context['order_number']} is on its way.\n\n"
                f"{tracking_block}"
            ),
        }
