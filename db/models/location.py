from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from db.base import Base


# same shape as Category, managed on its own
class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
