from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from tixly.models.notification import Notification

EVENT_CREATED = "event_created"
EVENT_UPDATED = "event_updated"
SUPPLY_UPDATED = "supply_updated"
TICKET_BOUGHT = "ticket_bought"
TICKET_USED = "ticket_used"


def _jsonable(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


class NotificationLog:
    @staticmethod
    def emit(db: Session, kind: str, **payload) -> Notification:
        """
        Append a notification to the log.
        Nothing is committed here; the entry lives or dies with the
        operation that produced it.
        """
        notification = Notification(kind=kind, payload=_jsonable(payload))
        db.add(notification)
        return notification

    @staticmethod
    def list(
        db: Session,
        after: int = 0,
        kind: Optional[str] = None,
        limit: int = 100
    ) -> list[Notification]:
        query = db.query(Notification).filter(Notification.sequence > after)
        if kind:
            query = query.filter(Notification.kind == kind)
        return query.order_by(Notification.sequence.asc()).limit(limit).all()
