from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class AttendanceMark(BaseModel):
    student_id: UUID
    present: bool = True


class AttendanceMarkRequest(BaseModel):
    """Mark a class. Re-marking the same student and date overwrites the earlier record."""

    class_date: date
    records: List[AttendanceMark] = Field(..., min_length=1)

    @model_validator(mode="after")
    def reject_duplicate_students(self) -> "AttendanceMarkRequest":
        ids = [r.student_id for r in self.records]
        if len(ids) != len(set(ids)):
            raise ValueError("each student may appear only once per class")
        return self


class AttendanceResponse(BaseModel):
    id: UUID
    student_id: UUID
    student_name: Optional[str] = None
    class_date: date
    present: bool
    created_at: datetime

    class Config:
        from_attributes = True


class StudentAttendanceStats(BaseModel):
    student_id: UUID
    student_name: str
    present_count: int
    total_classes: int
    attendance_rate: Optional[int] = None  # percent; None when no classes recorded
    consecutive_absences: int
    alert: bool


class AttendanceStatsResponse(BaseModel):
    month: str  # YYYY-MM
    students: List[StudentAttendanceStats]
