from tixly.services.auth import AuthService
from tixly.services.accounts import AccountService
from tixly.services.events import EventService
from tixly.services.sales import SaleService
from tixly.services.redemption import RedemptionService
from tixly.services.payment import PaymentService
from tixly.services.notifications import NotificationLog

__all__ = [
    "AuthService", "AccountService", "EventService", "SaleService",
    "RedemptionService", "PaymentService", "NotificationLog"
]
