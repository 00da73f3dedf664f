from tixly.models.account import Account
from tixly.models.event import Event, EventKind, TicketClass
from tixly.models.ticket import Ticket, TicketHolding
from tixly.models.certificate import Certificate
from tixly.models.ledger import LedgerEntry
from tixly.models.deposit import Deposit, DepositStatus
from tixly.models.notification import Notification
from tixly.models.sequence import Sequence

__all__ = [
    "Account", "Event", "EventKind", "TicketClass", "Ticket", "TicketHolding",
    "Certificate", "LedgerEntry", "Deposit", "DepositStatus", "Notification", "Sequence"
]
