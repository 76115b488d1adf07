"""
Dashboard sections.

Each section is read through the app's QueryCache, keyed by the section shape
and its parameters (today's date included, so a new day reads fresh data).
Read failures are logged and surface as an unavailable section; they are
never cached.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from volei.api.v1.attendance.schemas import AttendanceStatsResponse
from volei.api.v1.attendance.service import attendance_stats
from volei.api.v1.students.service import list_inactive_students
from volei.core import cache as shapes
from volei.core.cache import QueryCache
from volei.core.config import settings
from volei.core.dates import first_of_month
from volei.core.enums import PaymentStatus
from volei.core.exceptions import ServiceError
from volei.core.formatting import rounded_percent
from volei.core.models import AdditionalIncome, CourtExpense, ExtraExpense, Payment, Student

from .periods import aggregate_periods, window_start
from .schemas import (
    DashboardResponse,
    FinancialOverviewResponse,
    InactiveStudentItem,
    InactiveStudentsResponse,
    MonthBucketResponse,
    StudentStandingResponse,
    StudentStatusResponse,
    SummaryResponse,
)
from .standing import derive_standing

logger = logging.getLogger(__name__)

INACTIVE_PREVIEW_SIZE = 5


def _decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))


# ----- Loaders (uncached reads) -----
async def _sum(db: AsyncSession, column: Any, *criteria: Any) -> Decimal:
    stmt = select(func.coalesce(func.sum(column), 0))
    if criteria:
        stmt = stmt.where(*criteria)
    return _decimal((await db.execute(stmt)).scalar_one())


async def load_summary(db: AsyncSession) -> SummaryResponse:
    student_count = (await db.execute(select(func.count(Student.id)))).scalar_one()
    paid = await _sum(db, Payment.amount, Payment.status == PaymentStatus.paid.value)
    income = await _sum(db, AdditionalIncome.amount)
    court = await _sum(db, CourtExpense.amount)
    extra = await _sum(db, ExtraExpense.amount)
    revenue = paid + income
    expenses = court + extra
    return SummaryResponse(
        student_count=student_count,
        total_revenue=revenue,
        total_expenses=expenses,
        balance=revenue - expenses,
    )


async def load_financial_overview(db: AsyncSession, months: int, today: date) -> FinancialOverviewResponse:
    start = window_start(months, today)
    payments = (
        await db.execute(
            select(Payment.student_id, Payment.amount, Payment.due_date, Payment.status).where(
                Payment.due_date >= start, Payment.due_date <= today
            )
        )
    ).all()
    court = (
        await db.execute(
            select(CourtExpense.amount, CourtExpense.due_date).where(
                CourtExpense.due_date >= start, CourtExpense.due_date <= today
            )
        )
    ).all()
    extra = (
        await db.execute(
            select(ExtraExpense.amount, ExtraExpense.date).where(ExtraExpense.date >= start, ExtraExpense.date <= today)
        )
    ).all()
    income = (
        await db.execute(
            select(AdditionalIncome.amount, AdditionalIncome.date).where(
                AdditionalIncome.date >= start, AdditionalIncome.date <= today
            )
        )
    ).all()

    buckets = aggregate_periods(
        months,
        today,
        payments=payments,
        court_expenses=court,
        extra_expenses=extra,
        additional_income=income,
    )
    return FinancialOverviewResponse(
        months=months,
        start=start,
        end=today,
        buckets=[
            MonthBucketResponse(
                key=b.key,
                label=b.label,
                year=b.year,
                month=b.month,
                revenue=b.revenue,
                expenses=b.expenses,
                balance=b.balance,
                paid=b.paid,
                pending=b.pending,
                overdue=b.overdue,
                students_paid=b.students_paid,
                students_unpaid=b.students_unpaid,
            )
            for b in buckets
        ],
    )


async def load_student_status(db: AsyncSession, today: date, window_days: int) -> StudentStatusResponse:
    """Active students by name, each with the standing of their payments due in the window."""
    start = today - timedelta(days=window_days)
    students = (
        await db.execute(select(Student.id, Student.name).where(Student.active.is_(True)).order_by(Student.name))
    ).all()
    payments = (
        await db.execute(
            select(Payment.student_id, Payment.due_date, Payment.status)
            .join(Student, Student.id == Payment.student_id)
            .where(Student.active.is_(True), Payment.due_date >= start, Payment.due_date <= today)
            .order_by(Payment.created_at)
        )
    ).all()
    by_student: Dict[Any, List[Any]] = defaultdict(list)
    for payment in payments:
        by_student[payment.student_id].append(payment)

    rows = []
    for student_id, name in students:
        result = derive_standing(by_student.get(student_id, []))
        rows.append(
            StudentStandingResponse(
                student_id=student_id,
                name=name,
                standing=result.standing,
                label=result.standing.label,
                color=result.standing.color,
                needs_attention=result.needs_attention,
                latest_due_date=result.latest_due_date,
            )
        )
    return StudentStatusResponse(window_start=start, window_end=today, students=rows)


async def load_inactive_students(db: AsyncSession, today: date, recent_days: int) -> InactiveStudentsResponse:
    total = (await db.execute(select(func.count(Student.id)))).scalar_one()
    items = [InactiveStudentItem.model_validate(s) for s in await list_inactive_students(db)]
    recent_since = today - timedelta(days=recent_days)
    active_count = total - len(items)
    return InactiveStudentsResponse(
        inactive_count=len(items),
        active_count=active_count,
        total_count=total,
        retention_rate=rounded_percent(active_count, total) if total else 0,
        inactive_students=items[:INACTIVE_PREVIEW_SIZE],
        remaining_count=max(len(items) - INACTIVE_PREVIEW_SIZE, 0),
        recent_inactive=[s for s in items if s.inactive_date is not None and s.inactive_date >= recent_since],
    )


# ----- Cached sections -----
async def _section(
    db: AsyncSession,
    cache: QueryCache,
    shape: str,
    params: Dict[str, Any],
    loader: Callable[[], Awaitable[Any]],
) -> Any:
    try:
        return await cache.get_or_load(shape, params, loader)
    except SQLAlchemyError:
        logger.exception("Dashboard section %s could not be read", shape)
        await db.rollback()
        raise ServiceError("Dashboard data is temporarily unavailable", status.HTTP_503_SERVICE_UNAVAILABLE)


async def get_summary(db: AsyncSession, cache: QueryCache) -> SummaryResponse:
    return await _section(db, cache, shapes.SUMMARY, {}, lambda: load_summary(db))


async def get_financial_overview(
    db: AsyncSession,
    cache: QueryCache,
    months: Optional[int] = None,
    today: Optional[date] = None,
) -> FinancialOverviewResponse:
    months = months or settings.financial_window_months
    today = today or date.today()
    return await _section(
        db,
        cache,
        shapes.FINANCIAL_OVERVIEW,
        {"months": months, "today": today},
        lambda: load_financial_overview(db, months, today),
    )


async def get_student_status(
    db: AsyncSession,
    cache: QueryCache,
    today: Optional[date] = None,
) -> StudentStatusResponse:
    today = today or date.today()
    window_days = settings.student_status_window_days
    return await _section(
        db,
        cache,
        shapes.STUDENT_STATUS,
        {"today": today, "window_days": window_days},
        lambda: load_student_status(db, today, window_days),
    )


async def get_inactive_students(
    db: AsyncSession,
    cache: QueryCache,
    today: Optional[date] = None,
) -> InactiveStudentsResponse:
    today = today or date.today()
    recent_days = settings.inactive_recent_days
    return await _section(
        db,
        cache,
        shapes.INACTIVE_STUDENTS,
        {"today": today, "recent_days": recent_days},
        lambda: load_inactive_students(db, today, recent_days),
    )


async def get_attendance(
    db: AsyncSession,
    cache: QueryCache,
    month: Optional[date] = None,
) -> AttendanceStatsResponse:
    month = first_of_month(month or date.today())
    threshold = settings.consecutive_absence_alert
    return await _section(
        db,
        cache,
        shapes.ATTENDANCE_STATS,
        {"month": month, "threshold": threshold},
        lambda: attendance_stats(db, month, alert_threshold=threshold),
    )


async def get_dashboard(
    db: AsyncSession,
    cache: QueryCache,
    months: Optional[int] = None,
    month: Optional[date] = None,
    today: Optional[date] = None,
) -> DashboardResponse:
    """All sections; any that fail to load are left null and listed in `unavailable`."""
    today = today or date.today()
    sections = {
        "summary": lambda: get_summary(db, cache),
        "financial_overview": lambda: get_financial_overview(db, cache, months, today),
        "student_status": lambda: get_student_status(db, cache, today),
        "inactive_students": lambda: get_inactive_students(db, cache, today),
        "attendance": lambda: get_attendance(db, cache, month or today),
    }
    response = DashboardResponse()
    for name, load in sections.items():
        try:
            setattr(response, name, await load())
        except ServiceError:
            response.unavailable.append(name)
    if response.unavailable:
        logger.warning("Dashboard served without %s", ", ".join(response.unavailable))
    return response
