"""Order confirmation: sent to the customer once the order is recorded."""

from atelier.notification.kinds import NotificationKind


class OrderConfirmationTemplate:
    kind = NotificationKind.ORDER_CONFIRMATION

    @staticmethod
    def render(context: dict) -> dict:
        lines = "\n".join(f"  - {item['title']}  €{item['price']:.2f}" for item in context.get("items", []))
        return {
            "subject": f"Order confirmed - {context['order_number']}",
            "body": (
                f"Dear {context.get('customer_name') or 'customer'},\n\n"
                f"Thank you for your purchase. Your order {context['order_number']} has been received.\n\n"
                f"{lines}\n\n"
                f"Subtotal: €{context['subtotal']:.2f}\n"
                f"Shipping: €{context['shipping_cost']:.2f}\n"
                f"Total: €{context['total']:.2f}\n\n"
                f"Shipping to:\n{context.get('address') or 'N/A'}\n\n"
                f"Follow your order at {context['tracking_page_url']}"
            ),
        }
