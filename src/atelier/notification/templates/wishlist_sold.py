"""Wishlist notice: a piece the customer saved has been sold."""

from atelier.notification.kinds import NotificationKind


class WishlistSoldTemplate:
    kind = NotificationKind.WISHLIST_SOLD

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "subject": f"\"{context['product_title']}\" has been sold",
            "body": (
                f"Hello {context.get('user_name') or ''},\n\n"
                f"The piece \"{context['product_title']}\" on your wishlist has found a new home. "
                "Every item in our collection is one of a kind, but new arrivals come in regularly.\n\n"
                f"Browse the collection at {context['shop_url']}"
            ),
        }
