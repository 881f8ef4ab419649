"""Order repository: lookups by the external keys an order is known by."""

from atelier.domain import atelier
from atelier.order.order import Order

DEFAULT_PAGE_SIZE = 50


@atelier.repository(part_of=Order)
class OrderRepository:
    def find_by_session(self, payment_session_id: str) -> Order | None:
        return self._dao.query.filter(payment_session_id=payment_session_id).all().first

    def find_by_payment_intent(self, payment_intent_id: str) -> Order | None:
        if not payment_intent_id:
            return None
        return self._dao.query.filter(payment_intent_id=payment_intent_id).all().first

    def find_by_order_number(self, order_number: str) -> Order | None:
        return self._dao.query.filter(order_number=order_number).all().first

    def list_orders(self, status=None, user_id=None, limit=DEFAULT_PAGE_SIZE, offset=0):
        """Newest orders first, optionally narrowed to one status or one customer.

        Returns the ``ResultSet``; ``.items`` holds the page and ``.total`` the
        number of matching orders.
        """
        criteria = {}
        if status:
            criteria["status"] = status
        if user_id:
            criteria["user_id"] = str(user_id)

        query = self._dao.query
        if criteria:
            query = query.filter(**criteria)
        return query.order_by("-created_at").offset(offset).limit(limit).all()
