from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from db.base import Base


class Support(Base):
    __tablename__ = "supports"
    # one upvote per (complaint, browser)
    __table_args__ = (
        UniqueConstraint("complaint_id", "user_identifier", name="uq_support_pair"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    complaint_id = Column(
        String(36),
        ForeignKey("complaints.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_identifier = Column(String(100), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    complaint = relationship("Complaint", back_populates="supports")
