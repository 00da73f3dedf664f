from tixly.routers.accounts import router as accounts_router
from tixly.routers.events import router as events_router
from tixly.routers.tickets import router as tickets_router
from tixly.routers.payments import router as payments_router
from tixly.routers.notifications import router as notifications_router
from tixly.routers.admin import router as admin_router

__all__ = [
    "accounts_router",
    "events_router",
    "tickets_router",
    "payments_router",
    "notifications_router",
    "admin_router"
]
