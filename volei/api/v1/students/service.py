import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from volei.core.enums import StudentFilter
from volei.core.exceptions import NotFoundError, ServiceError
from volei.core.models import Student

from .schemas import StudentCountResponse, StudentCreate, StudentResponse, StudentUpdate

logger = logging.getLogger(__name__)


def _to_response(student: Student) -> StudentResponse:
    return StudentResponse.model_validate(student)


async def _get_or_404(db: AsyncSession, student_id: UUID) -> Student:
    result = await db.execute(select(Student).where(Student.id == student_id))
    student = result.scalar_one_or_none()
    if not student:
        raise NotFoundError("Student not found")
    return student


async def create_student(
    db: AsyncSession,
    payload: StudentCreate,
    today: Optional[date] = None,
) -> StudentResponse:
    """Register a student. A student created inactive gets inactive_date = today."""
    student = Student(
        name=payload.name,
        email=str(payload.email),
        phone=payload.phone,
        birth_date=payload.birth_date,
        active=payload.active,
        inactive_reason=None if payload.active else payload.inactive_reason,
        inactive_date=None if payload.active else (today or date.today()),
    )
    db.add(student)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Could not register student", status.HTTP_409_CONFLICT)
    await db.refresh(student)
    logger.info("Registered student %s (active=%s)", student.id, student.active)
    return _to_response(student)


async def list_students(
    db: AsyncSession,
    status_filter: StudentFilter = StudentFilter.active,
) -> List[StudentResponse]:
    """Students filtered by active state, ordered by name."""
    stmt = select(Student)
    if status_filter is StudentFilter.active:
        stmt = stmt.where(Student.active.is_(True))
    elif status_filter is StudentFilter.inactive:
        stmt = stmt.where(Student.active.is_(False))
    stmt = stmt.order_by(Student.name)
    result = await db.execute(stmt)
    return [_to_response(s) for s in result.scalars().all()]


async def list_inactive_students(db: AsyncSession) -> List[StudentResponse]:
    """Inactive students, most recently inactivated first."""
    result = await db.execute(
        select(Student)
        .where(Student.active.is_(False))
        .order_by(Student.inactive_date.desc(), Student.name)
    )
    return [_to_response(s) for s in result.scalars().all()]


async def get_student(db: AsyncSession, student_id: UUID) -> StudentResponse:
    return _to_response(await _get_or_404(db, student_id))


async def count_students(db: AsyncSession) -> StudentCountResponse:
    result = await db.execute(select(Student.active, func.count(Student.id)).group_by(Student.active))
    counts = {bool(active): n for active, n in result.all()}
    active = counts.get(True, 0)
    inactive = counts.get(False, 0)
    return StudentCountResponse(total=active + inactive, active=active, inactive=inactive)


async def update_student(
    db: AsyncSession,
    student_id: UUID,
    payload: StudentUpdate,
    today: Optional[date] = None,
) -> StudentResponse:
    """
    Edit a student. Reactivation clears inactive_reason / inactive_date.
    Deactivation keeps the submitted reason and date, defaulting the date to today.
    """
    student = await _get_or_404(db, student_id)
    submitted = payload.model_fields_set

    if payload.name is not None:
        student.name = payload.name
    if "email" in submitted:
        student.email = str(payload.email) if payload.email else None
    if "phone" in submitted:
        student.phone = payload.phone.strip() if payload.phone else None
    if "birth_date" in submitted:
        student.birth_date = payload.birth_date

    was_active = student.active
    if payload.active is not None:
        student.active = payload.active

    if student.active:
        student.inactive_reason = None
        student.inactive_date = None
    else:
        if "inactive_reason" in submitted:
            student.inactive_reason = payload.inactive_reason
        if payload.inactive_date is not None:
            student.inactive_date = payload.inactive_date
        elif was_active or student.inactive_date is None:
            student.inactive_date = today or date.today()

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Could not update student", status.HTTP_409_CONFLICT)
    await db.refresh(student)
    if was_active != student.active:
        logger.info("Student %s is now %s", student.id, "active" if student.active else "inactive")
    return _to_response(student)
