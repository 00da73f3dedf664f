from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from tixly.database import Base


class LedgerEntry(Base):
    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True, index=True)
    sender = Column(String(64), nullable=False, index=True)
    recipient = Column(String(64), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    memo = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
