from datetime import timedelta

import pytest

from tixly.errors import NotAuthorized, NotFound, ValidationFailed
from tixly.models.event import EventKind
from tixly.schemas.event import TicketClassInput
from tixly.services.events import EventService
from tixly.services.notifications import NotificationLog
from tixly.services.sales import SaleService
from tests.conftest import BUYER, NOW, ORGANIZER, OTHER, three_classes


def create_capacity(db, ticket_classes=None, total_tickets=100, date=None):
    return EventService.create_event(
        db,
        organizer=ORGANIZER,
        name="Summer Festival",
        metadata_uri="ipfs://festival",
        ticket_classes=three_classes() if ticket_classes is None else ticket_classes,
        date=date or NOW + timedelta(days=30),
        total_tickets=total_tickets,
        now=NOW
    )


def window(start_days=1, end_days=10):
    return {
        "sale_start": NOW + timedelta(days=start_days),
        "sale_end": NOW + timedelta(days=end_days),
    }


class TestCreateCapacityEvent:
    def test_creates_event_and_classes(self, db, capacity_event):
        assert capacity_event.id == 0
        assert capacity_event.kind == EventKind.CAPACITY
        assert capacity_event.total_tickets == 100
        assert capacity_event.tickets_sold == 0
        assert capacity_event.organizer == ORGANIZER

        vip = EventService.get_ticket_class(db, 0, "VIP")
        assert (vip.price, vip.supply) == (50, 20)
        assert EventService.get_available_tickets(db, 0) == 100
        assert EventService.get_available_tickets_by_type(db, 0, "Regular") == 50

    def test_ids_are_sequential_from_zero(self, db, accounts):
        ids = [create_capacity(db).id for _ in range(3)]
        assert ids == [0, 1, 2]

    def test_emits_event_created(self, db, capacity_event):
        [notification] = NotificationLog.list(db)
        assert notification.kind == "event_created"
        assert notification.payload["event_id"] == 0
        assert notification.payload["organizer"] == ORGANIZER
        assert notification.payload["metadata_uri"] == "ipfs://festival"
        assert notification.payload["total_tickets"] == 100
        assert notification.payload["event_kind"] == "capacity"

    def test_date_must_be_in_future(self, db, accounts):
        with pytest.raises(ValidationFailed, match="Event date must be in the future"):
            create_capacity(db, date=NOW)

    def test_total_must_be_positive(self, db, accounts):
        with pytest.raises(ValidationFailed, match="Total tickets must be greater than 0"):
            create_capacity(db, total_tickets=0)

    def test_class_list_required(self, db, accounts):
        with pytest.raises(ValidationFailed, match="At least one ticket type is required"):
            create_capacity(db, ticket_classes=[])

    def test_zero_supply_rejected(self, db, accounts):
        classes = [TicketClassInput(label="VIP", price=50, supply=0)]
        with pytest.raises(ValidationFailed, match="Ticket supply must be greater than 0"):
            create_capacity(db, ticket_classes=classes, total_tickets=1)

    def test_supplies_must_sum_to_total(self, db, accounts):
        with pytest.raises(ValidationFailed, match="Ticket supplies must sum to total tickets"):
            create_capacity(db, total_tickets=99)

    def test_rejected_create_leaves_nothing(self, db, accounts):
        with pytest.raises(ValidationFailed):
            create_capacity(db, total_tickets=99)
        assert EventService.list_events(db) == []
        assert NotificationLog.list(db) == []
        assert create_capacity(db).id == 0

    def test_duplicate_label_last_write_wins(self, db, accounts):
        classes = [
            TicketClassInput(label="VIP", price=50, supply=5),
            TicketClassInput(label="VIP", price=80, supply=5),
        ]
        event = create_capacity(db, ticket_classes=classes, total_tickets=10)
        vip = EventService.get_ticket_class(db, event.id, "VIP")
        assert (vip.price, vip.supply) == (80, 5)
        assert len(event.ticket_classes) == 1


class TestCreateWindowedEvent:
    def create(self, db, ticket_classes=None, start=None, end=None):
        return EventService.create_event(
            db,
            organizer=ORGANIZER,
            name="Tech Conference",
            metadata_uri="ipfs://conference",
            ticket_classes=three_classes(**window()) if ticket_classes is None else ticket_classes,
            start_date=start or NOW + timedelta(days=20),
            end_date=end or NOW + timedelta(days=22),
            now=NOW
        )

    def test_creates_event(self, db, windowed_event):
        assert windowed_event.kind == EventKind.WINDOWED
        assert NotificationLog.list(db)[0].payload["event_kind"] == "windowed"
        assert windowed_event.total_tickets is None
        vip = EventService.get_ticket_class(db, windowed_event.id, "VIP")
        assert vip.sale_start == NOW + timedelta(days=1)
        assert vip.sale_end == NOW + timedelta(days=10)
        assert EventService.get_available_tickets(db, windowed_event.id) == 100

    def test_start_must_be_in_future(self, db, accounts):
        with pytest.raises(ValidationFailed, match="Start date must be in the future"):
            self.create(db, start=NOW - timedelta(hours=1))

    def test_end_after_start(self, db, accounts):
        with pytest.raises(ValidationFailed, match="End date must be after start date"):
            self.create(db, start=NOW + timedelta(days=5), end=NOW + timedelta(days=5))

    def test_class_window_start_in_future(self, db, accounts):
        classes = [TicketClassInput(label="VIP", price=50, supply=5, **window(start_days=0))]
        with pytest.raises(ValidationFailed, match="Ticket sale start must be in the future"):
            self.create(db, ticket_classes=classes)

    def test_class_window_ordered(self, db, accounts):
        classes = [TicketClassInput(label="VIP", price=50, supply=5, **window(start_days=3, end_days=2))]
        with pytest.raises(ValidationFailed, match="Ticket sale end must be after sale start"):
            self.create(db, ticket_classes=classes)

    def test_class_window_may_lie_outside_event_window(self, db, accounts):
        classes = [TicketClassInput(label="Late", price=5, supply=5, **window(start_days=40, end_days=50))]
        event = self.create(db, ticket_classes=classes)
        assert EventService.get_available_tickets_by_type(db, event.id, "Late") == 5

    def test_no_update_path(self, db, windowed_event):
        with pytest.raises(ValidationFailed, match="only supported for capacity events"):
            EventService.update_event(
                db, ORGANIZER, windowed_event.id, "New", "", NOW + timedelta(days=40), now=NOW
            )
        with pytest.raises(ValidationFailed, match="only supported for capacity events"):
            EventService.update_ticket_supplies(db, ORGANIZER, windowed_event.id, [], 0, now=NOW)


class TestUpdateEvent:
    def test_organizer_updates_before_start(self, db, capacity_event):
        new_date = NOW + timedelta(days=60)
        event = EventService.update_event(
            db, ORGANIZER, capacity_event.id, "Autumn Festival", "ipfs://autumn", new_date, now=NOW
        )
        assert event.name == "Autumn Festival"
        assert event.metadata_uri == "ipfs://autumn"
        assert event.date == new_date
        assert NotificationLog.list(db)[-1].kind == "event_updated"

    def test_only_organizer(self, db, capacity_event):
        with pytest.raises(NotAuthorized):
            EventService.update_event(
                db, OTHER, capacity_event.id, "x", "", NOW + timedelta(days=60), now=NOW
            )

    def test_rejected_once_started(self, db, capacity_event):
        with pytest.raises(ValidationFailed, match="Event has already started"):
            EventService.update_event(
                db, ORGANIZER, capacity_event.id, "x", "",
                NOW + timedelta(days=60), now=capacity_event.date
            )

    def test_new_date_in_future(self, db, capacity_event):
        with pytest.raises(ValidationFailed, match="Event date must be in the future"):
            EventService.update_event(
                db, ORGANIZER, capacity_event.id, "x", "", NOW - timedelta(days=1), now=NOW
            )

    def test_unknown_event(self, db, accounts):
        with pytest.raises(NotFound):
            EventService.update_event(db, ORGANIZER, 7, "x", "", NOW + timedelta(days=1), now=NOW)


class TestUpdateTicketSupplies:
    def sell(self, db, event, count):
        for _ in range(count):
            SaleService.buy_ticket(db, BUYER, event.id, "", "VIP", 50, now=NOW)

    def test_replans_remaining_capacity(self, db, capacity_event):
        self.sell(db, capacity_event, 2)
        classes = [
            TicketClassInput(label="VIP", price=60, supply=18),
            TicketClassInput(label="Regular", price=10, supply=100),
        ]
        event = EventService.update_ticket_supplies(
            db, ORGANIZER, capacity_event.id, classes, 120, now=NOW
        )
        assert event.total_tickets == 120
        assert event.tickets_sold == 2
        assert EventService.get_available_tickets(db, event.id) == 118
        assert EventService.get_available_tickets_by_type(db, event.id, "VIP") == 18
        assert EventService.get_ticket_class(db, event.id, "VIP").price == 60
        # Left out of the list, so no longer on sale
        assert EventService.get_available_tickets_by_type(db, event.id, "Premium") == 0
        assert NotificationLog.list(db, kind="supply_updated")[0].payload["new_total"] == 120

    def test_total_below_sold_rejected(self, db, capacity_event):
        self.sell(db, capacity_event, 3)
        classes = [TicketClassInput(label="VIP", price=50, supply=0)]
        with pytest.raises(ValidationFailed, match="cannot be less than tickets sold"):
            EventService.update_ticket_supplies(db, ORGANIZER, capacity_event.id, classes, 2, now=NOW)

    def test_sum_must_match_remaining(self, db, capacity_event):
        self.sell(db, capacity_event, 1)
        classes = [TicketClassInput(label="VIP", price=50, supply=50)]
        with pytest.raises(ValidationFailed, match="must match remaining tickets"):
            EventService.update_ticket_supplies(db, ORGANIZER, capacity_event.id, classes, 50, now=NOW)
        assert EventService.get_available_tickets_by_type(db, capacity_event.id, "VIP") == 19

    def test_only_organizer(self, db, capacity_event):
        with pytest.raises(NotAuthorized):
            EventService.update_ticket_supplies(db, OTHER, capacity_event.id, three_classes(), 100, now=NOW)

    def test_rejected_once_started(self, db, capacity_event):
        with pytest.raises(ValidationFailed, match="Event has already started"):
            EventService.update_ticket_supplies(
                db, ORGANIZER, capacity_event.id, three_classes(), 100,
                now=capacity_event.date + timedelta(seconds=1)
            )


class TestAvailabilityReads:
    def test_unknown_event_reads_zero(self, db, accounts):
        assert EventService.get_available_tickets(db, 99) == 0
        assert EventService.get_available_tickets_by_type(db, 99, "VIP") == 0

    def test_unknown_label_reads_zero(self, db, capacity_event):
        assert EventService.get_available_tickets_by_type(db, capacity_event.id, "Balcony") == 0

    def test_get_event_unknown_raises(self, db, accounts):
        with pytest.raises(NotFound, match="Event does not exist"):
            EventService.get_event(db, 3)

    def test_list_events_by_organizer(self, db, capacity_event, windowed_event):
        assert [e.id for e in EventService.list_events(db)] == [0, 1]
        assert EventService.list_events(db, organizer=OTHER) == []
