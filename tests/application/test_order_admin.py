"""Application tests for back-office order operations."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from atelier.notification.dispatcher import NotificationDispatcher
from atelier.order.admin import OrderAdminController, TrackingDetails
from atelier.order.order import CancellationActor, OrderStatus
from atelier.product.ledger import InventoryLedger
from atelier.product.product import Product, ProductStatus

BRT = TrackingDetails(
    carrier_name="BRT",
    tracking_number="BRT123456789",
    tracking_url="https://tracking.example.com/BRT123456789",
)


@pytest.fixture
def admin(email):
    return OrderAdminController(dispatcher=NotificationDispatcher())


@pytest.fixture
def shipped_order(admin, place_order):
    order = place_order()
    return admin.update_status(order.id, OrderStatus.SHIPPED.value, tracking=BRT).order


class TestStatusTransitions:
    def test_ship_records_tracking(self, admin, place_order):
        order = place_order()

        result = admin.update_status(order.id, "SHIPPED", tracking=BRT)

        assert result.order.status == OrderStatus.SHIPPED.value
        assert result.order.shipped_at is not None
        assert result.order.carrier_name == "BRT"
        assert result.order.tracking_number == "BRT123456789"
        assert result.notification is None

    def test_ship_with_notify_sends_notice(self, admin, place_order, email):
        order = place_order()

        result = admin.update_status(order.id, "SHIPPED", tracking=BRT, notify=True)

        assert result.notification.sent is True
        [notice] = email.sent_to("giulia.conti@example.com")
        assert "has shipped" in notice["subject"]
        assert "BRT123456789" in notice["body"]

    def test_notify_ignored_for_other_targets(self, admin, shipped_order, email):
        result = admin.update_status(shipped_order.id, "DELIVERED", notify=True)

        assert result.order.status == OrderStatus.DELIVERED.value
        assert result.notification is None
        assert email.sent_emails == []

    def test_failed_notice_does_not_roll_back_shipping(self, admin, place_order, email):
        order = place_order()
        email.configure(should_succeed=False)

        result = admin.update_status(order.id, "SHIPPED", notify=True)

        assert result.order.status == OrderStatus.SHIPPED.value
        assert result.notification.sent is False

    def test_pending_cannot_ship(self, admin, place_order):
        order = place_order(paid=False)

        with pytest.raises(ValidationError) as exc:
            admin.update_status(order.id, "SHIPPED")

        assert "Cannot transition from PENDING to SHIPPED" in exc.value.messages["status"][0]
        assert admin.get_order(order.id).status == OrderStatus.PENDING.value

    def test_delivered_is_terminal(self, admin, shipped_order):
        admin.update_status(shipped_order.id, "DELIVERED")

        with pytest.raises(ValidationError):
            admin.update_status(shipped_order.id, "CANCELLED")

    @pytest.mark.parametrize("status", ["PAID", "PENDING", "LOST"])
    def test_status_outside_admin_targets_rejected(self, admin, place_order, status):
        order = place_order(paid=False)

        with pytest.raises(ValidationError):
            admin.update_status(order.id, status)

    def test_admin_cancel_keeps_pieces_sold(self, admin, place_order):
        order = place_order()
        InventoryLedger().reserve_as_sold(order.product_ids)

        result = admin.update_status(order.id, "CANCELLED")

        assert result.order.status == OrderStatus.CANCELLED.value
        assert result.order.cancelled_by == CancellationActor.ADMIN.value
        product = current_domain.repository_for(Product).get(order.product_ids[0])
        assert product.status == ProductStatus.SOLD.value

    def test_shipped_at_survives_cancellation(self, admin, shipped_order):
        shipped_at = shipped_order.shipped_at

        result = admin.update_status(shipped_order.id, "CANCELLED")

        assert result.order.shipped_at == shipped_at


class TestTrackingAndNotes:
    def test_tracking_requires_shipped_order(self, admin, place_order):
        order = place_order()

        with pytest.raises(ValidationError):
            admin.update_tracking(order.id, BRT)

    def test_internal_notes_replaced(self, admin, place_order):
        order = place_order()

        admin.update_internal_notes(order.id, "Fragile, double box")
        order = admin.update_internal_notes(order.id, "Collected in person")

        assert order.internal_notes == "Collected in person"


class TestCombinedUpdate:
    def test_ship_with_tracking_and_notes(self, admin, place_order, email):
        order = place_order()

        result = admin.update_order(
            order.id, status="SHIPPED", tracking=BRT, internal_notes="Insured for 300", notify=True
        )

        assert result.order.status == OrderStatus.SHIPPED.value
        assert result.order.tracking_number == "BRT123456789"
        assert result.order.internal_notes == "Insured for 300"
        assert result.notification.sent is True

    def test_tracking_only_on_shipped_order(self, admin, shipped_order, email):
        result = admin.update_order(shipped_order.id, tracking=TrackingDetails(tracking_number="GLS-42"))

        assert result.order.tracking_number == "GLS-42"
        assert result.order.carrier_name == "BRT"
        assert result.notification is None
        assert email.sent_emails == []

    def test_same_status_is_not_a_transition(self, admin, shipped_order):
        result = admin.update_order(shipped_order.id, status="SHIPPED", internal_notes="Checked")

        assert result.order.status == OrderStatus.SHIPPED.value
        assert result.order.internal_notes == "Checked"

    @pytest.mark.parametrize("closing_status", ["CANCELLED", "DELIVERED"])
    def test_closed_order_rejects_its_own_status(self, admin, shipped_order, closing_status):
        admin.update_status(shipped_order.id, closing_status)

        with pytest.raises(ValidationError) as exc:
            admin.update_order(shipped_order.id, status=closing_status, internal_notes="Should not be saved")

        assert f"Cannot transition from {closing_status} to {closing_status}" in exc.value.messages["status"][0]
        assert admin.get_order(shipped_order.id).internal_notes is None

    def test_rejected_status_writes_nothing(self, admin, place_order):
        order = place_order(paid=False)

        with pytest.raises(ValidationError):
            admin.update_order(order.id, status="DELIVERED", internal_notes="Should not be saved")

        assert admin.get_order(order.id).internal_notes is None


class TestResendShipmentNotice:
    def test_resend_uses_stored_tracking(self, admin, shipped_order, email):
        outcome = admin.resend_shipment_notification(shipped_order.id)

        assert outcome.sent is True
        assert outcome.recipient == "giulia.conti@example.com"
        [notice] = email.sent_emails
        assert "BRT123456789" in notice["body"]

    def test_override_without_persist_leaves_order(self, admin, shipped_order, email):
        admin.resend_shipment_notification(shipped_order.id, tracking_override=TrackingDetails(tracking_number="NEW-1"))

        assert "NEW-1" in email.sent_emails[0]["body"]
        order = admin.get_order(shipped_order.id)
        assert order.tracking_number == "BRT123456789"
        assert order.internal_notes is None

    def test_override_with_persist_updates_and_notes(self, admin, shipped_order, email):
        admin.resend_shipment_notification(
            shipped_order.id,
            tracking_override=TrackingDetails(tracking_number="NEW-1"),
            persist_override=True,
        )

        order = admin.get_order(shipped_order.id)
        assert order.tracking_number == "NEW-1"
        assert order.internal_notes == "Tracking updated on resend: tracking_number=NEW-1"

    def test_allowed_for_delivered_order(self, admin, shipped_order, email):
        admin.update_status(shipped_order.id, "DELIVERED")

        assert admin.resend_shipment_notification(shipped_order.id).sent is True

    def test_rejected_before_shipping(self, admin, place_order, email):
        order = place_order()

        with pytest.raises(ValidationError):
            admin.resend_shipment_notification(order.id)

        assert email.sent_emails == []

    def test_rejected_without_customer_email(self, admin, place_order):
        order = place_order(email=None)
        admin.update_status(order.id, "SHIPPED")

        with pytest.raises(ValidationError) as exc:
            admin.resend_shipment_notification(order.id)

        assert "customer" in exc.value.messages

    def test_failed_send_is_reported(self, admin, shipped_order, email):
        email.configure(should_succeed=False, failure_reason="Mailbox unavailable")

        outcome = admin.resend_shipment_notification(shipped_order.id)

        assert outcome.sent is False
        assert outcome.error == "Mailbox unavailable"


class TestListing:
    def test_newest_first_with_filters(self, admin, place_order):
        first = place_order(user_id="user-a")
        second = place_order(user_id="user-b", paid=False)
        third = place_order(user_id="user-a")

        everything = admin.list_orders()
        assert [o.id for o in everything.items] == [third.id, second.id, first.id]
        assert everything.total == 3

        pending = admin.list_orders(status="PENDING")
        assert [o.id for o in pending.items] == [second.id]

        mine = admin.list_orders(user_id="user-a")
        assert {o.id for o in mine.items} == {first.id, third.id}

    def test_pagination(self, admin, place_order):
        orders = [place_order() for _ in range(3)]

        page = admin.list_orders(limit=2, offset=1)

        assert [o.id for o in page.items] == [orders[1].id, orders[0].id]

    def test_unknown_status_filter_rejected(self, admin):
        with pytest.raises(ValidationError):
            admin.list_orders(status="LOST")
