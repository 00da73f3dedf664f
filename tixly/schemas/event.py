from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime, timezone
from typing import Optional
from tixly.models.event import EventKind


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Stored timestamps are naive UTC
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class TicketClassInput(BaseModel):
    label: str
    price: int = Field(ge=0)
    supply: int
    sale_start: Optional[datetime] = None
    sale_end: Optional[datetime] = None

    @field_validator("sale_start", "sale_end")
    @classmethod
    def normalize_window(cls, value):
        return _naive_utc(value)


class EventCreate(BaseModel):
    name: str
    metadata_uri: str = ""
    ticket_classes: list[TicketClassInput]
    date: Optional[datetime] = None
    total_tickets: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("date", "start_date", "end_date")
    @classmethod
    def normalize_timing(cls, value):
        return _naive_utc(value)

    @model_validator(mode="after")
    def check_timing_shape(self):
        capacity = self.date is not None or self.total_tickets is not None
        windowed = self.start_date is not None or self.end_date is not None
        if capacity == windowed:
            raise ValueError(
                "Provide either date and total_tickets, or start_date and end_date"
            )
        return self


class EventUpdate(BaseModel):
    name: str
    metadata_uri: str = ""
    date: datetime

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value):
        return _naive_utc(value)


class SupplyUpdate(BaseModel):
    ticket_classes: list[TicketClassInput]
    new_total: int


class TicketClassResponse(BaseModel):
    label: str
    price: int
    supply: int
    sale_start: Optional[datetime]
    sale_end: Optional[datetime]

    class Config:
        from_attributes = True


class EventResponse(BaseModel):
    id: int
    kind: EventKind
    name: str
    metadata_uri: str
    organizer: str
    date: Optional[datetime]
    total_tickets: Optional[int]
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    tickets_sold: int
    ticket_classes: list[TicketClassResponse] = []

    class Config:
        from_attributes = True


class AvailabilityResponse(BaseModel):
    event_id: int
    label: Optional[str] = None
    available: int
