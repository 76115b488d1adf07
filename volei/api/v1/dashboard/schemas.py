from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from volei.api.v1.attendance.schemas import AttendanceStatsResponse
from volei.core.enums import PaymentStanding


class SummaryResponse(BaseModel):
    student_count: int
    total_revenue: Decimal
    total_expenses: Decimal
    balance: Decimal


class MonthBucketResponse(BaseModel):
    key: str  # YYYY-MM
    label: str  # jan..dez, display only
    year: int
    month: int
    revenue: Decimal
    expenses: Decimal
    balance: Decimal
    paid: Decimal
    pending: Decimal
    overdue: Decimal
    students_paid: int
    students_unpaid: int


class FinancialOverviewResponse(BaseModel):
    months: int
    start: date
    end: date
    buckets: List[MonthBucketResponse]


class StudentStandingResponse(BaseModel):
    student_id: UUID
    name: str
    standing: PaymentStanding
    label: str
    color: str
    needs_attention: bool
    latest_due_date: Optional[date] = None


class StudentStatusResponse(BaseModel):
    window_start: date
    window_end: date
    students: List[StudentStandingResponse]


class InactiveStudentItem(BaseModel):
    id: UUID
    name: str
    inactive_reason: Optional[str] = None
    inactive_date: Optional[date] = None

    class Config:
        from_attributes = True


class InactiveStudentsResponse(BaseModel):
    inactive_count: int
    active_count: int
    total_count: int
    retention_rate: int  # percent of students still active
    inactive_students: List[InactiveStudentItem]  # most recent first, capped
    remaining_count: int
    recent_inactive: List[InactiveStudentItem]


class DashboardResponse(BaseModel):
    """Every dashboard section. A section that could not be read is null and named in `unavailable`."""

    summary: Optional[SummaryResponse] = None
    financial_overview: Optional[FinancialOverviewResponse] = None
    student_status: Optional[StudentStatusResponse] = None
    inactive_students: Optional[InactiveStudentsResponse] = None
    attendance: Optional[AttendanceStatsResponse] = None
    unavailable: List[str] = []
