from tixly.schemas.account import AccountCreate, AccountLogin, AccountResponse, Token
from tixly.schemas.event import (
    EventCreate, EventUpdate, SupplyUpdate, TicketClassInput, EventResponse
)
from tixly.schemas.ticket import TicketPurchase, TicketResponse
from tixly.schemas.notification import NotificationResponse
from tixly.schemas.payment import DepositCreate, DepositSession, DepositResponse

__all__ = [
    "AccountCreate", "AccountLogin", "AccountResponse", "Token",
    "EventCreate", "EventUpdate", "SupplyUpdate", "TicketClassInput", "EventResponse",
    "TicketPurchase", "TicketResponse",
    "NotificationResponse",
    "DepositCreate", "DepositSession", "DepositResponse"
]
