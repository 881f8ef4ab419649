"""Wishlist notice: a piece the customer saved is available again."""

from atelier.notification.kinds import NotificationKind


class BackInStockTemplate:
    kind = NotificationKind.BACK_IN_STOCK

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "subject": f"\"{context['product_title']}\" is available again",
            "body": (
                f"Hello {context.get('user_name') or ''},\n\n"
                f"Good news: \"{context['product_title']}\" from your wishlist is available again.\n\n"
                f"See it at {context['product_url']}"
            ),
        }
