"""InventoryLedger: moves unique pieces between AVAILABLE and SOLD."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain

from atelier.product.product import Product

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReservationResult:
    """Which requested pieces this call actually marked as sold."""

    succeeded: list[str] = field(default_factory=list)
    already_sold: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.already_sold


class InventoryLedger:
    def _repository(self):
        return current_domain.repository_for(Product)

    def reserve_as_sold(self, product_ids: list[str]) -> ReservationResult:
        """Mark each piece SOLD with a per-id conditional update.

        Ids that did not transition (already sold, or unknown) are reported in
        ``already_sold``. Deciding what to do about them is the caller's job.
        """
        repo = self._repository()
        now = datetime.now(UTC)
        succeeded, already_sold = [], []

        # dict.fromkeys keeps order and drops repeated ids
        for product_id in dict.fromkeys(str(pid) for pid in product_ids):
            if repo.mark_sold(product_id, now):
                succeeded.append(product_id)
            else:
                already_sold.append(product_id)

        logger.info(
            "Products reserved as sold",
            succeeded=succeeded,
            already_sold=already_sold,
        )
        return ReservationResult(succeeded=succeeded, already_sold=already_sold)

    def release_to_available(self, product_ids: list[str]) -> list[str]:
        """Return SOLD pieces to AVAILABLE and clear ``sold_at``. Returns released ids."""
        repo = self._repository()
        released = [
            product_id
            for product_id in dict.fromkeys(str(pid) for pid in product_ids)
            if repo.mark_available(product_id)
        ]

        logger.info("Products released to available", released=released, requested=list(product_ids))
        return released
