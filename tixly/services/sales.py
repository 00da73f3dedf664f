import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from tixly.clock import utcnow
from tixly.config import get_settings
from tixly.errors import NotFound, TransferFailed, ValidationFailed
from tixly.models.event import Event, EventKind, TicketClass
from tixly.models.ticket import Ticket, TicketHolding
from tixly.services import notifications
from tixly.services.fees import calculate_fee
from tixly.services.guards import (
    ledger_guard, require_before, require_sale_window, require_supply
)
from tixly.services.ledger import AccountLedger
from tixly.services.notifications import NotificationLog
from tixly.services.registry import CertificateRegistry, SQLCertificateRegistry
from tixly.services.sequences import CERTIFICATE_SEQUENCE, next_id

settings = get_settings()
logger = logging.getLogger(__name__)


class SaleService:
    @staticmethod
    def buy_ticket(
        db: Session,
        buyer: str,
        event_id: int,
        certificate_metadata: str,
        label: str,
        payment: int,
        registry: Optional[CertificateRegistry] = None,
        ledger: Optional[AccountLedger] = None,
        now: Optional[datetime] = None
    ) -> Ticket:
        """
        Sell one ticket of class `label` to `buyer` for `payment`.

        Everything happens in one transaction: the buyer is charged, the
        certificate minted, counters moved, then the organizer, the platform
        owner and (capacity events) the buyer's surplus are paid in that
        order. If any payout is refused the session is rolled back and
        nothing of the sale remains.
        """
        now = now or utcnow()
        registry = registry or SQLCertificateRegistry(db)
        ledger = ledger or AccountLedger(db)

        # Entered before the try block: a refused re-entry must not roll
        # back the sale already in progress.
        with ledger_guard:
            # Rows loaded before the guard (the caller's account, for one) may be stale
            db.expire_all()
            try:
                event, ticket_class = SaleService._check_purchase(db, event_id, label, payment, now)
                price = ticket_class.price

                ledger.debit(buyer, payment, memo=f"ticket purchase for event {event_id}")

                token_id = next_id(db, CERTIFICATE_SEQUENCE)
                registry.mint(buyer, token_id)
                registry.set_descriptor(token_id, certificate_metadata)

                ticket_class.supply -= 1
                event.tickets_sold += 1
                ticket = Ticket(id=token_id, event_id=event.id, used=False, purchased_at=now)
                db.add(ticket)
                if event.kind == EventKind.CAPACITY:
                    SaleService._record_holding(db, event.id, buyer)

                fee = calculate_fee(price)
                net_amount = price - fee
                SaleService._pay(ledger, event.organizer, net_amount, f"sale of ticket {token_id}",
                                 "Transfer to organizer failed")
                SaleService._pay(ledger, settings.platform_owner_address, fee, f"fee on ticket {token_id}",
                                 "Transfer to platform owner failed")
                if event.kind == EventKind.CAPACITY and payment > price:
                    SaleService._pay(ledger, buyer, payment - price, f"refund on ticket {token_id}",
                                     "Refund to buyer failed")

                NotificationLog.emit(
                    db,
                    notifications.TICKET_BOUGHT,
                    token_id=token_id,
                    event_id=event.id,
                    label=label,
                    buyer=buyer,
                    price=price
                )
                db.commit()
            except TransferFailed as e:
                db.rollback()
                logger.warning(f"Sale on event {event_id} rolled back: {e.reason}")
                raise
            except Exception:
                db.rollback()
                raise

        db.refresh(ticket)
        logger.info(
            f"Sold ticket {ticket.id} ({label}) on event {event_id} to {buyer} "
            f"for {price}, fee {fee}"
        )
        return ticket

    @staticmethod
    def _check_purchase(
        db: Session, event_id: int, label: str, payment: int, now: datetime
    ) -> tuple[Event, TicketClass]:
        event = db.get(Event, event_id)
        if event is None:
            raise NotFound("Event does not exist")

        if event.kind == EventKind.CAPACITY:
            require_before(event.date, now, "Event date has passed")

        ticket_class = db.get(TicketClass, (event_id, label))
        if ticket_class is None:
            raise NotFound("Ticket type does not exist")

        if event.kind == EventKind.WINDOWED:
            require_sale_window(ticket_class, now)

        require_supply(ticket_class)

        if event.kind == EventKind.CAPACITY:
            if payment < ticket_class.price:
                raise ValidationFailed("Insufficient funds")
        elif payment != ticket_class.price:
            raise ValidationFailed("Incorrect payment amount")

        return event, ticket_class

    @staticmethod
    def _record_holding(db: Session, event_id: int, buyer: str):
        holding = db.get(TicketHolding, (event_id, buyer))
        if holding is None:
            holding = TicketHolding(event_id=event_id, owner=buyer, count=0)
            db.add(holding)
        holding.count += 1

    @staticmethod
    def _pay(ledger: AccountLedger, recipient: str, amount: int, memo: str, reason: str):
        try:
            ledger.transfer(recipient, amount, memo=memo)
        except TransferFailed as e:
            raise TransferFailed(reason) from e
