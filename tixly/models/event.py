from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from tixly.database import Base
import enum


class EventKind(str, enum.Enum):
    CAPACITY = "capacity"
    WINDOWED = "windowed"


class Event(Base):
    __tablename__ = "events"

    # Assigned from the "event" sequence, starting at 0
    id = Column(Integer, primary_key=True, autoincrement=False)
    kind = Column(Enum(EventKind), nullable=False)
    name = Column(String(200), nullable=False)
    metadata_uri = Column(String(2000), nullable=False, default="")
    organizer = Column(String(64), nullable=False, index=True)
    date = Column(DateTime, nullable=True)
    total_tickets = Column(Integer, nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    tickets_sold = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())

    ticket_classes = relationship(
        "TicketClass", back_populates="event", order_by="TicketClass.label"
    )
    tickets = relationship("Ticket", back_populates="event")


class TicketClass(Base):
    __tablename__ = "ticket_classes"

    event_id = Column(Integer, ForeignKey("events.id"), primary_key=True)
    label = Column(String(100), primary_key=True)
    price = Column(Integer, nullable=False)
    supply = Column(Integer, nullable=False)
    sale_start = Column(DateTime, nullable=True)
    sale_end = Column(DateTime, nullable=True)

    event = relationship("Event", back_populates="ticket_classes")
