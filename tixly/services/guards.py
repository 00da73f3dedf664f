"""
Reusable precondition checks shared by the ticketing services.

Each guard raises a TicketingError subclass with a specific reason and
returns nothing on success.
"""
import threading
from datetime import datetime

from tixly.errors import NotAuthorized, ReentrancyError, ValidationFailed
from tixly.models.event import Event, EventKind, TicketClass


class ReentrancyGuard:
    """
    Exclusive lock held for the whole of a state-mutating operation.

    Other threads wait on the lock, so operations run one at a time in a
    total order. A second entry from the thread already holding it (a
    payment hook calling back into the service) is refused.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._entered = False

    @property
    def entered(self) -> bool:
        return self._entered

    def __enter__(self):
        self._lock.acquire()
        if self._entered:
            self._lock.release()
            raise ReentrancyError("Reentrant call")
        self._entered = True
        return self

    def __exit__(self, exc_type, exc, tb):
        self._entered = False
        self._lock.release()
        return False


ledger_guard = ReentrancyGuard()


def require_organizer(event: Event, caller: str):
    if event.organizer != caller:
        raise NotAuthorized("Only the organizer can perform this action")


def require_capacity(event: Event, reason: str):
    if event.kind != EventKind.CAPACITY:
        raise ValidationFailed(reason)


def require_windowed(event: Event, reason: str):
    if event.kind != EventKind.WINDOWED:
        raise ValidationFailed(reason)


def require_future(moment: datetime, now: datetime, reason: str):
    if moment is None or moment <= now:
        raise ValidationFailed(reason)


def require_before(moment: datetime, now: datetime, reason: str):
    """Passes while `now` is strictly earlier than `moment`."""
    if now >= moment:
        raise ValidationFailed(reason)


def require_ordered(start: datetime, end: datetime, reason: str):
    if end is None or end <= start:
        raise ValidationFailed(reason)


def require_sale_window(ticket_class: TicketClass, now: datetime):
    if not now > ticket_class.sale_start:
        raise ValidationFailed("Ticket sales have not started")
    if not now < ticket_class.sale_end:
        raise ValidationFailed("Ticket sales have ended")


def require_supply(ticket_class: TicketClass):
    if ticket_class.supply <= 0:
        raise ValidationFailed("Tickets sold out")
