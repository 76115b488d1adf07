"""Dashboard API router."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from volei.api.v1.attendance.schemas import AttendanceStatsResponse
from volei.auth.dependencies import get_current_user
from volei.core.cache import QueryCache, get_query_cache
from volei.core.dates import REFERENCE_MONTH_PATTERN, parse_reference_month
from volei.core.exceptions import ServiceError
from volei.db.session import get_db

from . import service
from .schemas import (
    DashboardResponse,
    FinancialOverviewResponse,
    InactiveStudentsResponse,
    StudentStatusResponse,
    SummaryResponse,
)

router = APIRouter(
    prefix="/api/v1/dashboard",
    tags=["dashboard"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    months: Optional[int] = Query(None, ge=1, le=24),
    month: Optional[str] = Query(None, pattern=REFERENCE_MONTH_PATTERN),
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> DashboardResponse:
    """Every dashboard section at once. Failed sections are null and listed in `unavailable`."""
    return await service.get_dashboard(
        db, cache, months=months, month=parse_reference_month(month) if month else None
    )


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> SummaryResponse:
    try:
        return await service.get_summary(db, cache)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/financial-overview", response_model=FinancialOverviewResponse)
async def get_financial_overview(
    months: Optional[int] = Query(None, ge=1, le=24, description="Months ending with the current one"),
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> FinancialOverviewResponse:
    try:
        return await service.get_financial_overview(db, cache, months=months)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/student-status", response_model=StudentStatusResponse)
async def get_student_status(
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> StudentStatusResponse:
    try:
        return await service.get_student_status(db, cache)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/inactive-students", response_model=InactiveStudentsResponse)
async def get_inactive_students(
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> InactiveStudentsResponse:
    try:
        return await service.get_inactive_students(db, cache)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/attendance", response_model=AttendanceStatsResponse)
async def get_attendance(
    month: Optional[str] = Query(None, pattern=REFERENCE_MONTH_PATTERN, description="YYYY-MM"),
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> AttendanceStatsResponse:
    try:
        return await service.get_attendance(db, cache, parse_reference_month(month) if month else None)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
