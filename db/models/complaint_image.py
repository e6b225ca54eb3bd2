from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from db.base import Base


class ComplaintImage(Base):
    __tablename__ = "complaint_images"

    # autoincrement id doubles as insertion order
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    complaint_id = Column(
        String(36),
        ForeignKey("complaints.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # encoded payload (data URL), stored as-is
    image_data = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    complaint = relationship("Complaint", back_populates="images")
