from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from tixly.database import get_db
from tixly.services.notifications import NotificationLog
from tixly.schemas.notification import NotificationResponse

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    after: int = 0,
    kind: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    return NotificationLog.list(db, after=after, kind=kind, limit=limit)
