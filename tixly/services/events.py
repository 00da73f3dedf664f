import logging
from datetime import datetime
from typing import Optional, Sequence as Seq
from sqlalchemy import func
from sqlalchemy.orm import Session

from tixly.clock import utcnow
from tixly.errors import NotFound, ValidationFailed
from tixly.models.event import Event, EventKind, TicketClass
from tixly.models.ticket import TicketHolding
from tixly.schemas.event import TicketClassInput
from tixly.services import notifications
from tixly.services.guards import (
    ledger_guard, require_capacity, require_future, require_ordered,
    require_organizer, require_before
)
from tixly.services.notifications import NotificationLog
from tixly.services.sequences import EVENT_SEQUENCE, next_id

logger = logging.getLogger(__name__)


class EventService:
    @staticmethod
    def create_event(
        db: Session,
        organizer: str,
        name: str,
        metadata_uri: str,
        ticket_classes: Seq[TicketClassInput],
        date: Optional[datetime] = None,
        total_tickets: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        now: Optional[datetime] = None
    ) -> Event:
        """
        Create an event and its ticket classes.

        Passing `date` and `total_tickets` creates a capacity event, passing
        `start_date` and `end_date` a windowed one. All checks run before
        anything is written. A label repeated in `ticket_classes` keeps its
        last entry.
        """
        now = now or utcnow()
        kind = EventKind.WINDOWED if start_date is not None or end_date is not None else EventKind.CAPACITY

        if kind == EventKind.CAPACITY:
            require_future(date, now, "Event date must be in the future")
            if not total_tickets or total_tickets <= 0:
                raise ValidationFailed("Total tickets must be greater than 0")
        else:
            require_future(start_date, now, "Start date must be in the future")
            require_ordered(start_date, end_date, "End date must be after start date")

        if not ticket_classes:
            raise ValidationFailed("At least one ticket type is required")

        running_total = 0
        for ticket_class in ticket_classes:
            if ticket_class.supply <= 0:
                raise ValidationFailed("Ticket supply must be greater than 0")
            if kind == EventKind.WINDOWED:
                # Class windows are independent of the event window
                require_future(ticket_class.sale_start, now, "Ticket sale start must be in the future")
                require_ordered(
                    ticket_class.sale_start, ticket_class.sale_end,
                    "Ticket sale end must be after sale start"
                )
            running_total += ticket_class.supply

        if kind == EventKind.CAPACITY and running_total != total_tickets:
            raise ValidationFailed("Ticket supplies must sum to total tickets")

        with ledger_guard:
            db.expire_all()
            try:
                event = Event(
                    id=next_id(db, EVENT_SEQUENCE),
                    kind=kind,
                    name=name,
                    metadata_uri=metadata_uri,
                    organizer=organizer,
                    date=date if kind == EventKind.CAPACITY else None,
                    total_tickets=total_tickets if kind == EventKind.CAPACITY else None,
                    start_date=start_date,
                    end_date=end_date,
                    tickets_sold=0
                )
                db.add(event)
                db.flush()

                for ticket_class in ticket_classes:
                    EventService._put_ticket_class(db, event, ticket_class)

                NotificationLog.emit(
                    db,
                    notifications.EVENT_CREATED,
                    event_id=event.id,
                    name=name,
                    metadata_uri=metadata_uri,
                    organizer=organizer,
                    event_kind=kind.value,
                    date=event.date,
                    total_tickets=event.total_tickets,
                    start_date=start_date,
                    end_date=end_date
                )
                db.commit()
            except Exception:
                db.rollback()
                raise

        db.refresh(event)
        logger.info(f"Created {kind.value} event {event.id} '{name}' for {organizer}")
        return event

    @staticmethod
    def update_event(
        db: Session,
        caller: str,
        event_id: int,
        name: str,
        metadata_uri: str,
        date: datetime,
        now: Optional[datetime] = None
    ) -> Event:
        """Rename, re-describe or reschedule a capacity event before it starts."""
        now = now or utcnow()

        with ledger_guard:
            db.expire_all()
            try:
                event = EventService.get_event(db, event_id)
                require_capacity(event, "Event updates are only supported for capacity events")
                require_organizer(event, caller)
                require_before(event.date, now, "Event has already started")
                require_future(date, now, "Event date must be in the future")

                event.name = name
                event.metadata_uri = metadata_uri
                event.date = date
                NotificationLog.emit(
                    db,
                    notifications.EVENT_UPDATED,
                    event_id=event.id,
                    name=name,
                    metadata_uri=metadata_uri,
                    date=date
                )
                db.commit()
            except Exception:
                db.rollback()
                raise

        db.refresh(event)
        logger.info(f"Updated event {event_id}")
        return event

    @staticmethod
    def update_ticket_supplies(
        db: Session,
        caller: str,
        event_id: int,
        ticket_classes: Seq[TicketClassInput],
        new_total: int,
        now: Optional[datetime] = None
    ) -> Event:
        """
        Re-plan the unsold capacity of a capacity event.

        `ticket_classes` describes the remaining supply only: it must sum to
        `new_total - tickets_sold`. Classes left out of the list stop
        selling. The sold count is never touched.
        """
        now = now or utcnow()

        with ledger_guard:
            # Sales committed by other sessions must be counted
            db.expire_all()
            try:
                event = EventService.get_event(db, event_id)
                require_capacity(event, "Supply updates are only supported for capacity events")
                require_organizer(event, caller)
                require_before(event.date, now, "Event has already started")

                if new_total < event.tickets_sold:
                    raise ValidationFailed("New total cannot be less than tickets sold")

                remaining = new_total - event.tickets_sold
                running_total = 0
                for ticket_class in ticket_classes:
                    if ticket_class.supply < 0:
                        raise ValidationFailed("Ticket supply cannot be negative")
                    running_total += ticket_class.supply
                if running_total != remaining:
                    raise ValidationFailed("Ticket supplies must match remaining tickets")

                for existing in event.ticket_classes:
                    existing.supply = 0
                for ticket_class in ticket_classes:
                    EventService._put_ticket_class(db, event, ticket_class)
                event.total_tickets = new_total

                NotificationLog.emit(
                    db,
                    notifications.SUPPLY_UPDATED,
                    event_id=event.id,
                    new_total=new_total,
                    tickets_sold=event.tickets_sold,
                    ticket_classes=[
                        {"label": c.label, "price": c.price, "supply": c.supply}
                        for c in ticket_classes
                    ]
                )
                db.commit()
            except Exception:
                db.rollback()
                raise

        db.refresh(event)
        logger.info(f"Updated supplies for event {event_id}: total {new_total}, sold {event.tickets_sold}")
        return event

    @staticmethod
    def get_event(db: Session, event_id: int) -> Event:
        event = db.get(Event, event_id)
        if event is None:
            raise NotFound("Event does not exist")
        return event

    @staticmethod
    def list_events(db: Session, organizer: Optional[str] = None) -> list[Event]:
        query = db.query(Event)
        if organizer:
            query = query.filter(Event.organizer == organizer)
        return query.order_by(Event.id.asc()).all()

    @staticmethod
    def get_ticket_class(db: Session, event_id: int, label: str) -> Optional[TicketClass]:
        return db.get(TicketClass, (event_id, label))

    @staticmethod
    def get_available_tickets(db: Session, event_id: int) -> int:
        """Unsold tickets for an event; an unknown event has none."""
        event = db.get(Event, event_id)
        if event is None:
            return 0
        if event.kind == EventKind.CAPACITY:
            return event.total_tickets - event.tickets_sold
        return db.query(func.coalesce(func.sum(TicketClass.supply), 0)).filter(
            TicketClass.event_id == event_id
        ).scalar()

    @staticmethod
    def get_available_tickets_by_type(db: Session, event_id: int, label: str) -> int:
        ticket_class = EventService.get_ticket_class(db, event_id, label)
        return ticket_class.supply if ticket_class else 0

    @staticmethod
    def get_tickets_owned(db: Session, event_id: int, owner: str) -> int:
        holding = db.get(TicketHolding, (event_id, owner))
        return holding.count if holding else 0

    @staticmethod
    def _put_ticket_class(db: Session, event: Event, ticket_class: TicketClassInput) -> TicketClass:
        row = db.get(TicketClass, (event.id, ticket_class.label))
        if row is None:
            row = TicketClass(event_id=event.id, label=ticket_class.label)
            db.add(row)
        row.price = ticket_class.price
        row.supply = ticket_class.supply
        if event.kind == EventKind.WINDOWED:
            row.sale_start = ticket_class.sale_start
            row.sale_end = ticket_class.sale_end
        # Flushed so a repeated label finds this row instead of adding a second one
        db.flush()
        return row
