from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class TicketPurchase(BaseModel):
    event_id: int
    label: str
    payment: int = Field(ge=0)
    certificate_metadata: str = ""


class TicketResponse(BaseModel):
    id: int
    event_id: int
    used: bool
    purchased_at: Optional[datetime]
    owner: Optional[str] = None
    descriptor: Optional[str] = None

    class Config:
        from_attributes = True
