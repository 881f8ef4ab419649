"""Internal notes: commands and handler. Notes are admin-only and inert."""

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from atelier.domain import atelier
from atelier.order.order import Order


@atelier.command(part_of="Order")
class UpdateInternalNotes:
    order_id = Identifier(required=True)
    notes = Text()


@atelier.command(part_of="Order")
class AppendInternalNote:
    order_id = Identifier(required=True)
    note = Text(required=True)


@atelier.command_handler(part_of=Order)
class InternalNotesHandler:
    @handle(UpdateInternalNotes)
    def update_notes(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.set_internal_notes(command.notes)
        repo.add(order)

    @handle(AppendInternalNote)
    def append_note(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.append_internal_note(command.note)
        repo.add(order)
