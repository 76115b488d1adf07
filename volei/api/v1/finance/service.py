"""Court expenses, extra expenses and additional income."""

import logging
from datetime import date
from typing import Any, List, Optional, Type
from uuid import UUID

from fastapi import status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from volei.core.exceptions import NotFoundError, ServiceError
from volei.core.models import AdditionalIncome, CourtExpense, ExtraExpense

from .schemas import (
    AdditionalIncomeCreate,
    AdditionalIncomeResponse,
    AdditionalIncomeUpdate,
    CourtExpenseCreate,
    CourtExpenseResponse,
    CourtExpenseUpdate,
    ExtraExpenseCreate,
    ExtraExpenseResponse,
    ExtraExpenseUpdate,
)

logger = logging.getLogger(__name__)


# ----- Shared row helpers -----
async def _get_or_404(db: AsyncSession, model: Type[Any], row_id: UUID, label: str) -> Any:
    result = await db.execute(select(model).where(model.id == row_id))
    row = result.scalar_one_or_none()
    if not row:
        raise NotFoundError(f"{label} not found")
    return row


async def _insert(db: AsyncSession, row: Any, label: str) -> Any:
    db.add(row)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError(f"Could not register {label.lower()}", status.HTTP_409_CONFLICT)
    await db.refresh(row)
    logger.info("Registered %s %s (%s)", label.lower(), row.id, row.amount)
    return row


async def _apply_update(db: AsyncSession, row: Any, payload: BaseModel, label: str) -> Any:
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field in ("amount", "date", "due_date"):
            continue
        setattr(row, field, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError(f"Could not update {label.lower()}", status.HTTP_409_CONFLICT)
    await db.refresh(row)
    logger.info("Updated %s %s", label.lower(), row.id)
    return row


async def _delete(db: AsyncSession, model: Type[Any], row_id: UUID, label: str) -> None:
    row = await _get_or_404(db, model, row_id, label)
    await db.delete(row)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError(f"Could not delete {label.lower()}", status.HTTP_409_CONFLICT)
    logger.info("Deleted %s %s", label.lower(), row_id)


async def _list_in_range(
    db: AsyncSession,
    model: Type[Any],
    date_column: Any,
    date_from: Optional[date],
    date_to: Optional[date],
) -> List[Any]:
    stmt = select(model)
    if date_from is not None:
        stmt = stmt.where(date_column >= date_from)
    if date_to is not None:
        stmt = stmt.where(date_column <= date_to)
    stmt = stmt.order_by(date_column, model.created_at)
    result = await db.execute(stmt)
    return list(result.scalars().all())


# ----- Court expenses -----
async def create_court_expense(db: AsyncSession, payload: CourtExpenseCreate) -> CourtExpenseResponse:
    row = CourtExpense(
        amount=payload.amount,
        due_date=payload.due_date,
        payment_date=payload.payment_date,
        description=payload.description,
    )
    return CourtExpenseResponse.model_validate(await _insert(db, row, "Court expense"))


async def list_court_expenses(
    db: AsyncSession,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[CourtExpenseResponse]:
    """Court expenses with due_date in range, ordered by due_date."""
    rows = await _list_in_range(db, CourtExpense, CourtExpense.due_date, date_from, date_to)
    return [CourtExpenseResponse.model_validate(r) for r in rows]


async def update_court_expense(
    db: AsyncSession, expense_id: UUID, payload: CourtExpenseUpdate
) -> CourtExpenseResponse:
    row = await _get_or_404(db, CourtExpense, expense_id, "Court expense")
    return CourtExpenseResponse.model_validate(await _apply_update(db, row, payload, "Court expense"))


async def delete_court_expense(db: AsyncSession, expense_id: UUID) -> None:
    await _delete(db, CourtExpense, expense_id, "Court expense")


# ----- Extra expenses -----
async def create_extra_expense(db: AsyncSession, payload: ExtraExpenseCreate) -> ExtraExpenseResponse:
    row = ExtraExpense(
        amount=payload.amount,
        date=payload.date,
        payment_date=payload.payment_date or payload.date,
        description=payload.description,
    )
    return ExtraExpenseResponse.model_validate(await _insert(db, row, "Extra expense"))


async def list_extra_expenses(
    db: AsyncSession,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[ExtraExpenseResponse]:
    rows = await _list_in_range(db, ExtraExpense, ExtraExpense.date, date_from, date_to)
    return [ExtraExpenseResponse.model_validate(r) for r in rows]


async def update_extra_expense(
    db: AsyncSession, expense_id: UUID, payload: ExtraExpenseUpdate
) -> ExtraExpenseResponse:
    row = await _get_or_404(db, ExtraExpense, expense_id, "Extra expense")
    submitted = payload.model_fields_set
    # payment_date follows date unless it is edited explicitly
    if payload.date is not None and "payment_date" not in submitted:
        row.payment_date = payload.date
    return ExtraExpenseResponse.model_validate(await _apply_update(db, row, payload, "Extra expense"))


async def delete_extra_expense(db: AsyncSession, expense_id: UUID) -> None:
    await _delete(db, ExtraExpense, expense_id, "Extra expense")


# ----- Additional income -----
async def create_additional_income(
    db: AsyncSession, payload: AdditionalIncomeCreate
) -> AdditionalIncomeResponse:
    row = AdditionalIncome(amount=payload.amount, date=payload.date, description=payload.description)
    return AdditionalIncomeResponse.model_validate(await _insert(db, row, "Additional income"))


async def list_additional_income(
    db: AsyncSession,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[AdditionalIncomeResponse]:
    rows = await _list_in_range(db, AdditionalIncome, AdditionalIncome.date, date_from, date_to)
    return [AdditionalIncomeResponse.model_validate(r) for r in rows]


async def update_additional_income(
    db: AsyncSession, income_id: UUID, payload: AdditionalIncomeUpdate
) -> AdditionalIncomeResponse:
    row = await _get_or_404(db, AdditionalIncome, income_id, "Additional income")
    return AdditionalIncomeResponse.model_validate(await _apply_update(db, row, payload, "Additional income"))


async def delete_additional_income(db: AsyncSession, income_id: UUID) -> None:
    await _delete(db, AdditionalIncome, income_id, "Additional income")
