from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from tixly.database import Base


class Notification(Base):
    __tablename__ = "notifications"

    sequence = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(String(50), nullable=False, index=True)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
