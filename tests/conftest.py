import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RATE_LIMIT_ENABLED"] = "false"

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import tixly.models  # noqa: F401
from tixly.config import get_settings
from tixly.database import Base, get_db
from tixly.models.account import Account
from tixly.schemas.event import TicketClassInput
from tixly.services.auth import AuthService
from tixly.services.events import EventService

settings = get_settings()

NOW = datetime(2030, 1, 1, 12, 0, 0)
ORGANIZER = "0xorganizer"
BUYER = "0xbuyer"
OTHER = "0xother"
OWNER = settings.platform_owner_address


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def second_db(engine):
    """Another session on the same database, as a concurrent request would hold."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def accounts(db):
    """Organizer, two buyers and the platform owner, all payable."""
    rows = {
        ORGANIZER: Account(address=ORGANIZER, username="organizer", balance=0),
        BUYER: Account(address=BUYER, username="buyer", balance=1000),
        OTHER: Account(address=OTHER, username="other", balance=1000),
        OWNER: Account(address=OWNER, username="platform", balance=0),
    }
    db.add_all(rows.values())
    db.commit()
    return rows


def balance(db, address):
    db.expire_all()
    return db.query(Account).filter(Account.address == address).one().balance


def three_classes(**window):
    return [
        TicketClassInput(label="VIP", price=50, supply=20, **window),
        TicketClassInput(label="Premium", price=25, supply=30, **window),
        TicketClassInput(label="Regular", price=10, supply=50, **window),
    ]


@pytest.fixture
def capacity_event(db, accounts):
    return EventService.create_event(
        db,
        organizer=ORGANIZER,
        name="Summer Festival",
        metadata_uri="ipfs://festival",
        ticket_classes=three_classes(),
        date=NOW + timedelta(days=30),
        total_tickets=100,
        now=NOW
    )


@pytest.fixture
def windowed_event(db, accounts):
    return EventService.create_event(
        db,
        organizer=ORGANIZER,
        name="Tech Conference",
        metadata_uri="ipfs://conference",
        ticket_classes=three_classes(
            sale_start=NOW + timedelta(days=1),
            sale_end=NOW + timedelta(days=10)
        ),
        start_date=NOW + timedelta(days=20),
        end_date=NOW + timedelta(days=22),
        now=NOW
    )


# Inside the windowed event's class sale window
SALE_TIME = NOW + timedelta(days=2)


@pytest.fixture
def client(db):
    from tixly.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(address):
    token = AuthService.create_access_token(data={"sub": address})
    return {"Authorization": f"Bearer {token}"}
