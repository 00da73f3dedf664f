import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from tixly.database import init_db
from tixly.config import get_settings
from tixly.errors import TicketingError
from tixly.middleware.security import setup_security_middleware
from tixly.routers import (
    accounts_router,
    events_router,
    tickets_router,
    payments_router,
    notifications_router,
    admin_router
)
from tixly.routers.accounts import limiter

settings = get_settings()
logger = logging.getLogger(__name__)


def configure_logging():
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    logger.info(
        f"Tixly started: platform owner {settings.platform_owner_address}, fee {settings.fee_bps} bps"
    )
    yield


app = FastAPI(
    title="Tixly",
    description="Event tickets issued as uniquely owned certificates",
    version="1.0.0",
    lifespan=lifespan
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

setup_security_middleware(app, allowed_hosts=settings.allowed_hosts)

app.include_router(accounts_router)
app.include_router(events_router)
app.include_router(tickets_router)
app.include_router(payments_router)
app.include_router(notifications_router)
app.include_router(admin_router)


@app.exception_handler(TicketingError)
async def ticketing_error_handler(request: Request, exc: TicketingError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.reason})


@app.get("/health")
async def health():
    return {"status": "ok"}
