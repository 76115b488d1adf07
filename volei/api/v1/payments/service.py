import csv
import io
import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import status
from openpyxl import Workbook
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from volei.core.enums import PaymentStatus
from volei.core.exceptions import NotFoundError, ServiceError
from volei.core.formatting import format_currency, format_date, payment_status_label
from volei.core.models import Payment, Student

from .schemas import PaymentCreate, PaymentResponse, PaymentUpdate

logger = logging.getLogger(__name__)

HISTORY_HEADERS = ("Aluno", "Valor", "Vencimento", "Data Pagamento", "Status")
HISTORY_SHEET_NAME = "Pagamentos"
MISSING = "N/A"


def resolve_payment_date(
    status_value: PaymentStatus,
    payment_date: Optional[date],
    today: Optional[date] = None,
) -> Optional[date]:
    """payment_date is set exactly when the payment is paid; a paid payment without one is dated today."""
    if status_value is not PaymentStatus.paid:
        return None
    return payment_date or today or date.today()


def _to_response(payment: Payment, student_name: Optional[str] = None) -> PaymentResponse:
    return PaymentResponse(
        id=payment.id,
        student_id=payment.student_id,
        student_name=student_name,
        amount=payment.amount,
        due_date=payment.due_date,
        payment_date=payment.payment_date,
        status=PaymentStatus(payment.status),
        created_at=payment.created_at,
    )


async def _ensure_student(db: AsyncSession, student_id: UUID) -> Student:
    result = await db.execute(select(Student).where(Student.id == student_id))
    student = result.scalar_one_or_none()
    if not student:
        raise NotFoundError("Student not found")
    return student


async def _get_or_404(db: AsyncSession, payment_id: UUID) -> Payment:
    result = await db.execute(select(Payment).where(Payment.id == payment_id))
    payment = result.scalar_one_or_none()
    if not payment:
        raise NotFoundError("Payment not found")
    return payment


async def _student_name(db: AsyncSession, student_id: Optional[UUID]) -> Optional[str]:
    if student_id is None:
        return None
    result = await db.execute(select(Student.name).where(Student.id == student_id))
    return result.scalar_one_or_none()


async def create_payment(
    db: AsyncSession,
    payload: PaymentCreate,
    today: Optional[date] = None,
) -> PaymentResponse:
    student = await _ensure_student(db, payload.student_id)
    payment = Payment(
        student_id=student.id,
        amount=payload.amount,
        due_date=payload.due_date,
        status=payload.status.value,
        payment_date=resolve_payment_date(payload.status, payload.payment_date, today),
    )
    db.add(payment)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Could not register payment", status.HTTP_409_CONFLICT)
    await db.refresh(payment)
    logger.info(
        "Registered payment %s for student %s (%s, due %s)",
        payment.id, student.id, payment.status, payment.due_date,
    )
    return _to_response(payment, student.name)


async def list_payments(
    db: AsyncSession,
    due_from: Optional[date] = None,
    due_to: Optional[date] = None,
    student_id: Optional[UUID] = None,
    newest_first: bool = False,
) -> List[PaymentResponse]:
    """Payments in a due_date range with the student's name, ordered by due_date."""
    stmt = select(Payment, Student.name).outerjoin(Student, Student.id == Payment.student_id)
    if due_from is not None:
        stmt = stmt.where(Payment.due_date >= due_from)
    if due_to is not None:
        stmt = stmt.where(Payment.due_date <= due_to)
    if student_id is not None:
        stmt = stmt.where(Payment.student_id == student_id)
    if newest_first:
        stmt = stmt.order_by(Payment.due_date.desc(), Payment.created_at.desc())
    else:
        stmt = stmt.order_by(Payment.due_date, Payment.created_at)
    result = await db.execute(stmt)
    return [_to_response(payment, name) for payment, name in result.all()]


async def get_payment(db: AsyncSession, payment_id: UUID) -> PaymentResponse:
    payment = await _get_or_404(db, payment_id)
    return _to_response(payment, await _student_name(db, payment.student_id))


async def update_payment(
    db: AsyncSession,
    payment_id: UUID,
    payload: PaymentUpdate,
    today: Optional[date] = None,
) -> PaymentResponse:
    """Partial update. The status/payment_date pairing is re-derived from the merged state."""
    payment = await _get_or_404(db, payment_id)
    if payload.student_id is not None:
        await _ensure_student(db, payload.student_id)
        payment.student_id = payload.student_id
    if payload.amount is not None:
        payment.amount = payload.amount
    if payload.due_date is not None:
        payment.due_date = payload.due_date

    new_status = payload.status or PaymentStatus(payment.status)
    if "payment_date" in payload.model_fields_set:
        requested_date = payload.payment_date
    else:
        requested_date = payment.payment_date
    payment.status = new_status.value
    payment.payment_date = resolve_payment_date(new_status, requested_date, today)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Could not update payment", status.HTTP_409_CONFLICT)
    await db.refresh(payment)
    logger.info("Updated payment %s (%s)", payment.id, payment.status)
    return _to_response(payment, await _student_name(db, payment.student_id))


async def delete_payment(db: AsyncSession, payment_id: UUID) -> None:
    payment = await _get_or_404(db, payment_id)
    await db.delete(payment)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Could not delete payment", status.HTTP_409_CONFLICT)
    logger.info("Deleted payment %s", payment_id)


def _history_rows(payments: List[PaymentResponse]) -> List[List[str]]:
    return [
        [
            p.student_name or MISSING,
            format_currency(p.amount),
            format_date(p.due_date),
            format_date(p.payment_date) or MISSING,
            payment_status_label(p.status),
        ]
        for p in payments
    ]


def build_history_csv(payments: List[PaymentResponse]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(HISTORY_HEADERS)
    writer.writerows(_history_rows(payments))
    # BOM so spreadsheet apps pick UTF-8 for the accented headers
    return buffer.getvalue().encode("utf-8-sig")


def build_history_xlsx(payments: List[PaymentResponse]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = HISTORY_SHEET_NAME
    ws.append(list(HISTORY_HEADERS))
    for row in _history_rows(payments):
        ws.append(row)
    bio = io.BytesIO()
    wb.save(bio)
    return bio.getvalue()
