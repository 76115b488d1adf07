import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from volei.db.session import Base


class Attendance(Base):
    """Student attendance: one row per student per class date."""

    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("student_id", "class_date", name="uq_attendance_student_date"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    class_date = Column(Date, nullable=False, index=True)
    present = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    student = relationship("Student", back_populates="attendance")
