"""Tracking metadata edits: command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from atelier.domain import atelier
from atelier.order.order import Order


@atelier.command(part_of="Order")
class UpdateTracking:
    order_id = Identifier(required=True)
    carrier_name = String(max_length=100)
    tracking_number = String(max_length=255)
    tracking_url = String(max_length=500)


@atelier.command_handler(part_of=Order)
class UpdateTrackingHandler:
    @handle(UpdateTracking)
    def update_tracking(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.update_tracking(
            carrier_name=command.carrier_name,
            tracking_number=command.tracking_number,
            tracking_url=command.tracking_url,
        )
        repo.add(order)
