"""Payment outcome recording: commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from atelier.domain import atelier
from atelier.order.order import Order


@atelier.command(part_of="Order")
class RecordPayment:
    order_id = Identifier(required=True)


@atelier.command(part_of="Order")
class RecordPaymentFailure:
    order_id = Identifier(required=True)
    reason = String(max_length=500)


@atelier.command_handler(part_of=Order)
class PaymentOutcomeHandler:
    @handle(RecordPayment)
    def record_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_paid()
        repo.add(order)

    @handle(RecordPaymentFailure)
    def record_payment_failure(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_payment_failure(reason=command.reason)
        repo.add(order)
