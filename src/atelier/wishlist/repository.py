"""Wishlist repository: candidate lookups and atomic notification claims."""

from protean.utils.query import Q

from atelier.domain import atelier
from atelier.wishlist.wishlist import WishlistItem


@atelier.repository(part_of=WishlistItem)
class WishlistRepository:
    def awaiting_sold_notice(self, product_id: str) -> list[WishlistItem]:
        return (
            self._dao.query.filter(product_id=str(product_id), notify_on_sale=True, notified_sold=False)
            .all()
            .items
        )

    def awaiting_available_notice(self, product_id: str) -> list[WishlistItem]:
        return (
            self._dao.query.filter(product_id=str(product_id), notify_on_available=True, notified_available=False)
            .all()
            .items
        )

    def claim_sold_notice(self, item_id: str) -> bool:
        """Flip ``notified_sold`` false → true. Only one caller ever gets True.

        A sold notice re-arms the back-in-stock notice.
        """
        updated = self._dao._update_all(
            Q(id=str(item_id), notified_sold=False),
            notified_sold=True,
            notified_available=False,
        )
        return updated == 1

    def release_sold_claim(self, item_id: str) -> None:
        """Undo a claim whose email could not be sent, so a later run may retry."""
        self._dao._update_all(Q(id=str(item_id)), notified_sold=False)

    def claim_available_notice(self, item_id: str) -> bool:
        """Flip ``notified_available`` false → true; re-arms the sold notice."""
        updated = self._dao._update_all(
            Q(id=str(item_id), notified_available=False),
            notified_available=True,
            notified_sold=False,
        )
        return updated == 1

    def release_available_claim(self, item_id: str) -> None:
        self._dao._update_all(Q(id=str(item_id)), notified_available=False)
