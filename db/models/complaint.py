from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
)
from sqlalchemy.orm import relationship

from db.base import Base


class Complaint(Base):
    __tablename__ = "complaints"

    # uuid4 string, generated by the service before insert
    id = Column(String(36), primary_key=True, index=True)
    student_name = Column(String(100), nullable=True)
    email = Column(String(200), nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    # by-value references, no foreign key on purpose
    category = Column(String(100), nullable=False, index=True)
    location = Column(String(100), nullable=True, index=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    created_at = Column(DateTime, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=False)

    # relations (cascade on delete)
    images = relationship(
        "ComplaintImage",
        back_populates="complaint",
        cascade="all, delete-orphan",
        order_by="ComplaintImage.id",
    )
    comments = relationship(
        "Comment",
        back_populates="complaint",
        cascade="all, delete-orphan",
        order_by="[Comment.created_at.desc(), Comment.pk.desc()]",
    )
    supports = relationship(
        "Support",
        back_populates="complaint",
        cascade="all, delete-orphan",
    )
