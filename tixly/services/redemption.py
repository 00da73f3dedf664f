import logging
from sqlalchemy.orm import Session

from tixly.errors import NotFound, ValidationFailed
from tixly.models.ticket import Ticket
from tixly.services import notifications
from tixly.services.guards import ledger_guard, require_organizer, require_windowed
from tixly.services.notifications import NotificationLog

logger = logging.getLogger(__name__)


class RedemptionService:
    @staticmethod
    def use_ticket(db: Session, caller: str, token_id: int) -> Ticket:
        """
        Mark a ticket as used. Only the organizer of the ticket's event may
        do this, at any time they choose, and only once per ticket.
        """
        with ledger_guard:
            # Another session may have redeemed it since this one loaded it
            db.expire_all()
            try:
                ticket = db.get(Ticket, token_id)
                if ticket is None:
                    raise NotFound("Ticket does not exist")

                event = ticket.event
                require_windowed(event, "Ticket redemption is only supported for windowed events")
                require_organizer(event, caller)
                if ticket.used:
                    raise ValidationFailed("Ticket already used")

                ticket.used = True
                NotificationLog.emit(
                    db,
                    notifications.TICKET_USED,
                    token_id=token_id,
                    event_id=event.id,
                    organizer=caller
                )
                db.commit()
            except Exception:
                db.rollback()
                raise

        db.refresh(ticket)
        logger.info(f"Ticket {token_id} for event {event.id} marked used")
        return ticket

    @staticmethod
    def is_ticket_used(db: Session, token_id: int) -> bool:
        ticket = db.get(Ticket, token_id)
        return bool(ticket and ticket.used)

    @staticmethod
    def get_event_id(db: Session, token_id: int) -> int:
        ticket = db.get(Ticket, token_id)
        if ticket is None:
            raise NotFound("Ticket does not exist")
        return ticket.event_id
