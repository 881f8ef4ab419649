"""New-order alert for the shop owner."""

from atelier.notification.kinds import NotificationKind


class AdminNewOrderTemplate:
    kind = NotificationKind.ADMIN_NEW_ORDER

    @staticmethod
    def render(context: dict) -> dict:
        lines = "\n".join(f"  - {item['title']} ({item['slug']})  €{item['price']:.2f}" for item in context["items"])
        return {
            "subject": f"New order {context['order_number']} - €{context['total']:.2f}",
            "body": (
                f"A new order has been placed.\n\n"
                f"Order: {context['order_number']}\n"
                f"Customer: {context.get('customer_name') or 'N/A'} <{context.get('customer_email') or 'N/A'}>\n"
                f"Phone: {context.get('customer_phone') or 'N/A'}\n\n"
                f"{lines}\n\n"
                f"Total: €{context['total']:.2f}\n\n"
                f"Ship to:\n{context.get('address') or 'N/A'}"
            ),
        }
