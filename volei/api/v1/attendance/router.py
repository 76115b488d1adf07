"""Attendance API router."""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from volei.auth.dependencies import get_current_user
from volei.core.cache import QueryCache, get_query_cache
from volei.core.config import settings
from volei.core.dates import REFERENCE_MONTH_PATTERN, parse_reference_month
from volei.core.exceptions import ServiceError
from volei.core.models import Attendance
from volei.db.session import get_db

from . import service
from .schemas import AttendanceMarkRequest, AttendanceResponse, AttendanceStatsResponse

router = APIRouter(
    prefix="/api/v1/attendance",
    tags=["attendance"],
    dependencies=[Depends(get_current_user)],
)


@router.post("", response_model=List[AttendanceResponse])
async def mark_attendance(
    payload: AttendanceMarkRequest,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> List[AttendanceResponse]:
    """Record presence or absence for a class date."""
    try:
        records = await service.mark_attendance(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    cache.invalidate_table(Attendance.__tablename__)
    return records


@router.get("", response_model=List[AttendanceResponse])
async def list_attendance(
    class_date: Optional[date] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    student_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db),
) -> List[AttendanceResponse]:
    return await service.list_attendance(
        db, class_date=class_date, date_from=date_from, date_to=date_to, student_id=student_id
    )


@router.get("/stats", response_model=AttendanceStatsResponse)
async def attendance_stats(
    month: Optional[str] = Query(None, pattern=REFERENCE_MONTH_PATTERN, description="YYYY-MM, defaults to this month"),
    db: AsyncSession = Depends(get_db),
) -> AttendanceStatsResponse:
    reference = parse_reference_month(month) if month else date.today()
    return await service.attendance_stats(db, reference, alert_threshold=settings.consecutive_absence_alert)
