"""Product repository with compare-and-set status updates.

Status changes driven by payments never read the product first. Each one is
a single conditional update whose row count tells the caller whether *this*
call made the transition, so two concurrent buyers of the same piece cannot
both observe success.
"""

from datetime import datetime

from protean.utils.query import Q

from atelier.domain import atelier
from atelier.product.product import SELLABLE_STATUSES, Product, ProductStatus


@atelier.repository(part_of=Product)
class ProductRepository:
    def mark_sold(self, product_id: str, sold_at: datetime) -> bool:
        """Transition one product to SOLD unless it already is. True if it moved."""
        updated = self._dao._update_all(
            Q(id=str(product_id), status__in=SELLABLE_STATUSES),
            status=ProductStatus.SOLD.value,
            sold_at=sold_at,
        )
        return updated == 1

    def mark_available(self, product_id: str) -> bool:
        """Transition one product from SOLD back to AVAILABLE. True if it moved."""
        updated = self._dao._update_all(
            Q(id=str(product_id), status=ProductStatus.SOLD.value),
            status=ProductStatus.AVAILABLE.value,
            sold_at=None,
        )
        return updated == 1

    def find_many(self, product_ids: list[str]) -> list[Product]:
        if not product_ids:
            return []
        return self._dao.query.filter(id__in=[str(pid) for pid in product_ids]).all().items
