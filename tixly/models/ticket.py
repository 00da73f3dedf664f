from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from tixly.database import Base


class Ticket(Base):
    __tablename__ = "tickets"

    # Same number as the certificate minted in the registry
    id = Column(Integer, primary_key=True, autoincrement=False)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    used = Column(Boolean, nullable=False, default=False)
    purchased_at = Column(DateTime, server_default=func.now())

    event = relationship("Event", back_populates="tickets")


class TicketHolding(Base):
    """Tickets bought per buyer for a capacity event."""

    __tablename__ = "ticket_holdings"

    event_id = Column(Integer, ForeignKey("events.id"), primary_key=True)
    owner = Column(String(64), primary_key=True)
    count = Column(Integer, nullable=False, default=0)
