"""Students API router."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from volei.auth.dependencies import get_current_user
from volei.core.cache import QueryCache, get_query_cache
from volei.core.enums import StudentFilter
from volei.core.exceptions import ServiceError
from volei.core.models import Student
from volei.db.session import get_db

from . import service
from .schemas import StudentCountResponse, StudentCreate, StudentResponse, StudentUpdate

router = APIRouter(
    prefix="/api/v1/students",
    tags=["students"],
    dependencies=[Depends(get_current_user)],
)


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> StudentResponse:
    """Register a student."""
    try:
        created = await service.create_student(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    cache.invalidate_table(Student.__tablename__)
    return created


@router.get("", response_model=List[StudentResponse])
async def list_students(
    status_filter: StudentFilter = Query(StudentFilter.active, alias="status", description="active, inactive or all"),
    db: AsyncSession = Depends(get_db),
) -> List[StudentResponse]:
    """List students ordered by name. Defaults to active students."""
    return await service.list_students(db, status_filter)


@router.get("/count", response_model=StudentCountResponse)
async def count_students(db: AsyncSession = Depends(get_db)) -> StudentCountResponse:
    return await service.count_students(db)


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> StudentResponse:
    try:
        return await service.get_student(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: UUID,
    payload: StudentUpdate,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> StudentResponse:
    """Edit a student, including the active/inactive transition."""
    try:
        updated = await service.update_student(db, student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    cache.invalidate_table(Student.__tablename__)
    return updated
