from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from tixly.database import Base


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    address = Column(String(64), unique=True, index=True, nullable=False)
    username = Column(String(50), unique=True, index=True, nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=True)
    hashed_password = Column(String(255), nullable=True)
    # Native asset, smallest unit
    balance = Column(Integer, nullable=False, default=0)
    # Transfers to a non-payable account are refused
    payable = Column(Boolean, nullable=False, default=True)
    is_admin = Column(Boolean, default=False)
    created_at = Column(DateTime, server_default=func.now())
