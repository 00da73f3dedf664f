from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional

from tixly.database import get_db
from tixly.services.auth import get_current_account_required
from tixly.services.events import EventService
from tixly.models.account import Account
from tixly.schemas.event import (
    AvailabilityResponse, EventCreate, EventResponse, EventUpdate, SupplyUpdate
)

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    account: Account = Depends(get_current_account_required),
    db: Session = Depends(get_db)
):
    return EventService.create_event(
        db,
        organizer=account.address,
        name=event_data.name,
        metadata_uri=event_data.metadata_uri,
        ticket_classes=event_data.ticket_classes,
        date=event_data.date,
        total_tickets=event_data.total_tickets,
        start_date=event_data.start_date,
        end_date=event_data.end_date
    )


@router.get("", response_model=list[EventResponse])
async def list_events(
    organizer: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return EventService.list_events(db, organizer=organizer)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: int, db: Session = Depends(get_db)):
    return EventService.get_event(db, event_id)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: int,
    event_data: EventUpdate,
    account: Account = Depends(get_current_account_required),
    db: Session = Depends(get_db)
):
    return EventService.update_event(
        db,
        caller=account.address,
        event_id=event_id,
        name=event_data.name,
        metadata_uri=event_data.metadata_uri,
        date=event_data.date
    )


@router.put("/{event_id}/supplies", response_model=EventResponse)
async def update_ticket_supplies(
    event_id: int,
    supply_data: SupplyUpdate,
    account: Account = Depends(get_current_account_required),
    db: Session = Depends(get_db)
):
    return EventService.update_ticket_supplies(
        db,
        caller=account.address,
        event_id=event_id,
        ticket_classes=supply_data.ticket_classes,
        new_total=supply_data.new_total
    )


@router.get("/{event_id}/available", response_model=AvailabilityResponse)
async def available_tickets(event_id: int, db: Session = Depends(get_db)):
    return AvailabilityResponse(
        event_id=event_id,
        available=EventService.get_available_tickets(db, event_id)
    )


@router.get("/{event_id}/available/{label}", response_model=AvailabilityResponse)
async def available_tickets_by_type(event_id: int, label: str, db: Session = Depends(get_db)):
    return AvailabilityResponse(
        event_id=event_id,
        label=label,
        available=EventService.get_available_tickets_by_type(db, event_id, label)
    )


@router.get("/{event_id}/holdings/{owner}")
async def tickets_owned(event_id: int, owner: str, db: Session = Depends(get_db)):
    return {
        "event_id": event_id,
        "owner": owner,
        "count": EventService.get_tickets_owned(db, event_id, owner)
    }
