from sqlalchemy import Column, Integer, String
from tixly.database import Base


class Sequence(Base):
    __tablename__ = "sequences"

    name = Column(String(50), primary_key=True)
    next_value = Column(Integer, nullable=False)
