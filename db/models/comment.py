from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from db.base import Base


class Comment(Base):
    __tablename__ = "comments"

    # autoincrement key doubles as insertion order (created_at ties)
    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), unique=True, nullable=False, index=True)
    complaint_id = Column(
        String(36),
        ForeignKey("complaints.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(100), nullable=False, default="Anonymous")
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False)

    complaint = relationship("Complaint", back_populates="comments")
