from pydantic import BaseModel
from datetime import datetime
from typing import Any, Optional


class NotificationResponse(BaseModel):
    sequence: int
    kind: str
    payload: dict[str, Any]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
