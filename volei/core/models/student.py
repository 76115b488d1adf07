import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, String, Text, Uuid
from sqlalchemy.orm import relationship

from volei.db.session import Base


class Student(Base):
    """
    Club member. inactive_reason / inactive_date are only populated while active = false
    and are cleared on reactivation. Students are never hard-deleted.
    """

    __tablename__ = "students"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    birth_date = Column(Date, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    inactive_reason = Column(Text, nullable=True)
    inactive_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    payments = relationship("Payment", back_populates="student")
    attendance = relationship("Attendance", back_populates="student", cascade="all, delete-orphan")
