"""Admin status changes: command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from atelier.domain import atelier
from atelier.order.order import ADMIN_TARGET_STATUSES, CancellationActor, Order, OrderStatus


@atelier.command(part_of="Order")
class ChangeOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    carrier_name = String(max_length=100)
    tracking_number = String(max_length=255)
    tracking_url = String(max_length=500)


def _admin_target(value: str) -> OrderStatus:
    try:
        target = OrderStatus(value)
    except ValueError:
        raise ValidationError({"status": [f"Unknown order status: {value}"]}) from None
    if target not in ADMIN_TARGET_STATUSES:
        allowed = ", ".join(sorted(s.value for s in ADMIN_TARGET_STATUSES))
        raise ValidationError({"status": [f"Status {value} cannot be set manually, allowed: {allowed}"]})
    return target


@atelier.command_handler(part_of=Order)
class ChangeOrderStatusHandler:
    @handle(ChangeOrderStatus)
    def change_status(self, command):
        target = _admin_target(command.status)

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if target == OrderStatus.SHIPPED:
            order.ship(
                carrier_name=command.carrier_name,
                tracking_number=command.tracking_number,
                tracking_url=command.tracking_url,
            )
        elif target == OrderStatus.DELIVERED:
            order.deliver()
        else:
            order.cancel(cancelled_by=CancellationActor.ADMIN.value)

        repo.add(order)
