from sqlalchemy import Column, Integer, String
from tixly.database import Base


class Certificate(Base):
    __tablename__ = "certificates"

    token_id = Column(Integer, primary_key=True, autoincrement=False)
    owner = Column(String(64), nullable=False, index=True)
    descriptor = Column(String(2000), nullable=True)
