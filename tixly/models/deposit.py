from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from tixly.database import Base
import enum


class DepositStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REFUNDED = "refunded"


class Deposit(Base):
    __tablename__ = "deposits"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    amount = Column(Integer, nullable=False)
    stripe_payment_id = Column(String(255), nullable=True)
    stripe_session_id = Column(String(255), nullable=True)
    status = Column(Enum(DepositStatus), default=DepositStatus.PENDING)
    created_at = Column(DateTime, server_default=func.now())

    account = relationship("Account")
