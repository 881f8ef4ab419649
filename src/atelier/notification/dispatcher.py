"""NotificationDispatcher: fans order lifecycle events out to email.

Every message is sent on its own. A failure (adapter error, exception,
missing data) is logged with the order number, recipient and kind, and
then swallowed: the next message is still attempted and the order that
triggered it is never affected. Nothing here retries; a shipment notice can
be resent by an admin.
"""

import os
from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from atelier.notification.channel import get_email_channel
from atelier.notification.kinds import NotificationKind
from atelier.notification.templates import get_template
from atelier.product.product import Product
from atelier.wishlist.wishlist import WishlistItem

logger = structlog.get_logger(__name__)

DEFAULT_STOREFRONT_URL = "http://localhost:3000"


@dataclass(frozen=True)
class DispatchOutcome:
    kind: NotificationKind
    recipient: str | None
    sent: bool
    message_id: str | None = None
    error: str | None = None


def _format_address(address) -> str | None:
    if address is None:
        return None
    city_line = " ".join(part for part in (address.postal_code, address.city) if part)
    parts = [address.line1, address.line2, city_line, address.state, address.country]
    return "\n".join(part for part in parts if part) or None


def _order_context(order) -> dict:
    customer = order.customer
    return {
        "order_number": order.order_number,
        "customer_name": customer.name if customer else None,
        "customer_email": customer.email if customer else None,
        "customer_phone": customer.phone if customer else None,
        "address": _format_address(order.shipping_address),
        "items": [
            {"title": item.product_title, "slug": item.product_slug, "price": item.price} for item in order.items
        ],
        "subtotal": order.pricing.subtotal,
        "shipping_cost": order.pricing.shipping_cost,
        "tax": order.pricing.tax,
        "total": order.pricing.total,
    }


class NotificationDispatcher:
    def __init__(self, channel=None, storefront_url: str | None = None):
        self._channel = channel
        self.storefront_url = (storefront_url or os.getenv("STOREFRONT_URL") or DEFAULT_STOREFRONT_URL).rstrip("/")

    @property
    def channel(self):
        return self._channel if self._channel is not None else get_email_channel()

    # -------------------------------------------------------------------
    # Single-message sends
    # -------------------------------------------------------------------
    def _send(self, kind: NotificationKind, recipient: str | None, context: dict, **log_context) -> DispatchOutcome:
        log = logger.bind(kind=kind.value, recipient=recipient, **log_context)

        if not recipient:
            log.warning("Notification skipped, no recipient address")
            return DispatchOutcome(kind=kind, recipient=None, sent=False, error="No recipient address")

        try:
            content = get_template(kind).render(context)
            result = self.channel.send(to=recipient, subject=content["subject"], body=content["body"])
        except Exception as exc:
            log.error("Notification dispatch failed", error=str(exc))
            return DispatchOutcome(kind=kind, recipient=recipient, sent=False, error=str(exc))

        if result.get("status") != "sent":
            error = result.get("error") or "Unknown dispatch error"
            log.error("Notification dispatch failed", error=error)
            return DispatchOutcome(kind=kind, recipient=recipient, sent=False, error=error)

        log.info("Notification sent", message_id=result.get("message_id"))
        return DispatchOutcome(kind=kind, recipient=recipient, sent=True, message_id=result.get("message_id"))

    def send_order_confirmation(self, order) -> DispatchOutcome:
        context = _order_context(order)
        context["tracking_page_url"] = f"{self.storefront_url}/order-tracking"
        return self._send(
            NotificationKind.ORDER_CONFIRMATION, order.customer_email, context, order_number=order.order_number
        )

    def send_admin_new_order(self, order, admin_email: str | None) -> DispatchOutcome:
        return self._send(
            NotificationKind.ADMIN_NEW_ORDER, admin_email, _order_context(order), order_number=order.order_number
        )

    def send_shipment_notice(self, order, tracking: dict | None = None) -> DispatchOutcome:
        """Send the shipment email; ``tracking`` values take precedence over the order's own."""
        details = dict(order.tracking)
        details.update({key: value for key, value in (tracking or {}).items() if value})

        context = {
            "order_number": order.order_number,
            "customer_name": order.customer.name if order.customer else None,
            **details,
        }
        return self._send(
            NotificationKind.SHIPMENT_NOTICE, order.customer_email, context, order_number=order.order_number
        )

    def send_wishlist_sold(self, entry: WishlistItem, product: Product) -> DispatchOutcome:
        context = {
            "user_name": entry.user_name,
            "product_title": product.title,
            "shop_url": f"{self.storefront_url}/shop",
        }
        return self._send(NotificationKind.WISHLIST_SOLD, entry.user_email, context, product_id=str(product.id))

    def send_back_in_stock(self, entry: WishlistItem, product: Product) -> DispatchOutcome:
        context = {
            "user_name": entry.user_name,
            "product_title": product.title,
            "product_url": f"{self.storefront_url}/product/{product.slug}",
        }
        return self._send(NotificationKind.BACK_IN_STOCK, entry.user_email, context, product_id=str(product.id))

    # -------------------------------------------------------------------
    # Fan-out
    # -------------------------------------------------------------------
    def notify_order_placed(
        self,
        order,
        sold_product_ids: list[str],
        admin_email: str | None,
        send_confirmation: bool = True,
        notify_wishlists: bool = True,
    ) -> list[DispatchOutcome]:
        """Confirmation, wishlist-sold notices and admin alert for a new order."""
        outcomes = []

        if send_confirmation:
            outcomes.append(self.send_order_confirmation(order))
        else:
            logger.info("Order confirmation disabled in settings", order_number=order.order_number)

        if notify_wishlists:
            outcomes.extend(self.notify_wishlists_sold(sold_product_ids, buyer_id=order.user_id))

        outcomes.append(self.send_admin_new_order(order, admin_email))
        return outcomes

    def notify_wishlists_sold(self, product_ids: list[str], buyer_id=None) -> list[DispatchOutcome]:
        """Tell everyone else who saved these pieces that they are gone.

        Each entry is claimed (``notified_sold`` false → true) before its email
        goes out, so reprocessing the same sale never emails anyone twice. A
        failed send gives the claim back.
        """
        return self._notify_wishlists(
            product_ids,
            find=lambda repo, product_id: repo.awaiting_sold_notice(product_id),
            claim=lambda repo, entry_id: repo.claim_sold_notice(entry_id),
            release=lambda repo, entry_id: repo.release_sold_claim(entry_id),
            send=self.send_wishlist_sold,
            skip_user=buyer_id,
        )

    def notify_wishlists_available(self, product_ids: list[str]) -> list[DispatchOutcome]:
        """Tell customers waiting on these pieces that they can be bought again."""
        return self._notify_wishlists(
            product_ids,
            find=lambda repo, product_id: repo.awaiting_available_notice(product_id),
            claim=lambda repo, entry_id: repo.claim_available_notice(entry_id),
            release=lambda repo, entry_id: repo.release_available_claim(entry_id),
            send=self.send_back_in_stock,
        )

    def _notify_wishlists(self, product_ids, find, claim, release, send, skip_user=None):
        wishlist_repo = current_domain.repository_for(WishlistItem)
        product_repo = current_domain.repository_for(Product)
        outcomes = []

        for product_id in product_ids:
            try:
                product = product_repo.get(product_id)
                entries = find(wishlist_repo, product_id)
            except Exception as exc:
                logger.error("Could not load wishlist entries", product_id=str(product_id), error=str(exc))
                continue

            for entry in entries:
                if skip_user and str(entry.user_id) == str(skip_user):
                    continue
                try:
                    if not claim(wishlist_repo, entry.id):
                        continue
                    outcome = send(entry, product)
                    if not outcome.sent:
                        release(wishlist_repo, entry.id)
                    outcomes.append(outcome)
                except Exception as exc:
                    logger.error(
                        "Wishlist notification failed",
                        product_id=str(product_id),
                        wishlist_item_id=str(entry.id),
                        recipient=entry.user_email,
                        error=str(exc),
                    )

        return outcomes
