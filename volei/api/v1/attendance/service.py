import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from volei.core.dates import first_of_month, last_of_month
from volei.core.exceptions import NotFoundError, ServiceError
from volei.core.formatting import rounded_percent
from volei.core.models import Attendance, Student

from .schemas import (
    AttendanceMarkRequest,
    AttendanceResponse,
    AttendanceStatsResponse,
    StudentAttendanceStats,
)

logger = logging.getLogger(__name__)


def _to_response(record: Attendance, student_name: Optional[str]) -> AttendanceResponse:
    return AttendanceResponse(
        id=record.id,
        student_id=record.student_id,
        student_name=student_name,
        class_date=record.class_date,
        present=record.present,
        created_at=record.created_at,
    )


def trailing_absences(presences: Iterable[bool]) -> int:
    """Length of the absence run at the head of `presences` (newest first)."""
    run = 0
    for present in presences:
        if present:
            break
        run += 1
    return run


def attendance_rate(present_count: int, total: int) -> Optional[int]:
    """Percent of classes attended; None when there were no classes."""
    if total == 0:
        return None
    return rounded_percent(present_count, total)


async def mark_attendance(db: AsyncSession, payload: AttendanceMarkRequest) -> List[AttendanceResponse]:
    """
    Upsert one record per (student, class_date).
    All students must exist; otherwise nothing is written.
    """
    student_ids = [r.student_id for r in payload.records]
    result = await db.execute(select(Student.id, Student.name).where(Student.id.in_(student_ids)))
    names: Dict[UUID, str] = {sid: name for sid, name in result.all()}
    missing = [str(sid) for sid in student_ids if sid not in names]
    if missing:
        raise NotFoundError(f"Student not found: {', '.join(missing)}")

    result = await db.execute(
        select(Attendance).where(
            Attendance.class_date == payload.class_date,
            Attendance.student_id.in_(student_ids),
        )
    )
    existing = {a.student_id: a for a in result.scalars().all()}

    records = []
    for mark in payload.records:
        record = existing.get(mark.student_id)
        if record is None:
            record = Attendance(student_id=mark.student_id, class_date=payload.class_date, present=mark.present)
            db.add(record)
        else:
            record.present = mark.present
        records.append(record)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Could not record attendance", status.HTTP_409_CONFLICT)
    for record in records:
        await db.refresh(record)
    logger.info(
        "Recorded attendance for %d students on %s (%d new)",
        len(records), payload.class_date, len(records) - len(existing),
    )
    return [_to_response(r, names[r.student_id]) for r in records]


async def list_attendance(
    db: AsyncSession,
    class_date: Optional[date] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    student_id: Optional[UUID] = None,
) -> List[AttendanceResponse]:
    """Records on a class date (or within a range), with student names, by date then name."""
    stmt = select(Attendance, Student.name).join(Student, Student.id == Attendance.student_id)
    if class_date is not None:
        stmt = stmt.where(Attendance.class_date == class_date)
    else:
        if date_from is not None:
            stmt = stmt.where(Attendance.class_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(Attendance.class_date <= date_to)
    if student_id is not None:
        stmt = stmt.where(Attendance.student_id == student_id)
    stmt = stmt.order_by(Attendance.class_date, Student.name)
    result = await db.execute(stmt)
    return [_to_response(record, name) for record, name in result.all()]


async def attendance_stats(
    db: AsyncSession,
    month: date,
    alert_threshold: int = 2,
) -> AttendanceStatsResponse:
    """
    Per active student: classes and presences in `month`, attendance rate, and the
    current run of consecutive absences across all their records. `alert` is raised
    when that run exceeds `alert_threshold`.
    """
    start, end = first_of_month(month), last_of_month(month)

    result = await db.execute(select(Student.id, Student.name).where(Student.active.is_(True)).order_by(Student.name))
    students = result.all()

    result = await db.execute(
        select(Attendance.student_id, Attendance.class_date, Attendance.present)
        .join(Student, Student.id == Attendance.student_id)
        .where(Student.active.is_(True))
        .order_by(Attendance.student_id, Attendance.class_date.desc())
    )
    history = defaultdict(list)
    for sid, class_date, present in result.all():
        history[sid].append((class_date, present))

    rows = []
    for sid, name in students:
        records = history.get(sid, [])
        in_month = [present for class_date, present in records if start <= class_date <= end]
        present_count = sum(1 for p in in_month if p)
        run = trailing_absences(present for _, present in records)
        rows.append(
            StudentAttendanceStats(
                student_id=sid,
                student_name=name,
                present_count=present_count,
                total_classes=len(in_month),
                attendance_rate=attendance_rate(present_count, len(in_month)),
                consecutive_absences=run,
                alert=run > alert_threshold,
            )
        )
    return AttendanceStatsResponse(month=start.strftime("%Y-%m"), students=rows)
