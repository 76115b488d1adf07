"""Club ledgers: court rent, extra expenses and additional income."""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from volei.auth.dependencies import get_current_user
from volei.core.cache import QueryCache, get_query_cache
from volei.core.exceptions import ServiceError
from volei.core.models import AdditionalIncome, CourtExpense, ExtraExpense
from volei.db.session import get_db

from . import service
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

router = APIRouter(
    prefix="/api/v1/finance",
    tags=["finance"],
    dependencies=[Depends(get_current_user)],
)


# ----- Court expenses -----
@router.post("/court-expenses", response_model=CourtExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_court_expense(
    payload: CourtExpenseCreate,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> CourtExpenseResponse:
    try:
        created = await service.create_court_expense(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    cache.invalidate_table(CourtExpense.__tablename__)
    return created


@router.get("/court-expenses", response_model=List[CourtExpenseResponse])
async def list_court_expenses(
    date_from: Optional[date] = Query(None, description="Earliest due_date (inclusive)"),
    date_to: Optional[date] = Query(None, description="Latest due_date (inclusive)"),
    db: AsyncSession = Depends(get_db),
) -> List[CourtExpenseResponse]:
    return await service.list_court_expenses(db, date_from=date_from, date_to=date_to)


@router.put("/court-expenses/{expense_id}", response_model=CourtExpenseResponse)
async def update_court_expense(
    expense_id: UUID,
    payload: CourtExpenseUpdate,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> CourtExpenseResponse:
    try:
        updated = await service.update_court_expense(db, expense_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    cache.invalidate_table(CourtExpense.__tablename__)
    return updated


@router.delete("/court-expenses/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_court_expense(
    expense_id: UUID,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> Response:
    try:
        await service.delete_court_expense(db, expense_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    cache.invalidate_table(CourtExpense.__tablename__)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ----- Extra expenses -----
@router.post("/extra-expenses", response_model=ExtraExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_extra_expense(
    payload: ExtraExpenseCreate,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> ExtraExpenseResponse:
    try:
        created = await service.create_extra_expense(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    cache.invalidate_table(ExtraExpense.__tablename__)
    return created


@router.get("/extra-expenses", response_model=List[ExtraExpenseResponse])
async def list_extra_expenses(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: AsyncSession = Depends(get_db),
) -> List[ExtraExpenseResponse]:
    return await service.list_extra_expenses(db, date_from=date_from, date_to=date_to)


@router.put("/extra-expenses/{expense_id}", response_model=ExtraExpenseResponse)
async def update_extra_expense(
    expense_id: UUID,
    payload: ExtraExpenseUpdate,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> ExtraExpenseResponse:
    try:
        updated = await service.update_extra_expense(db, expense_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    cache.invalidate_table(ExtraExpense.__tablename__)
    return updated


@router.delete("/extra-expenses/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_extra_expense(
    expense_id: UUID,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> Response:
    try:
        await service.delete_extra_expense(db, expense_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    cache.invalidate_table(ExtraExpense.__tablename__)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ----- Additional income -----
@router.post(
    "/additional-income", response_model=AdditionalIncomeResponse, status_code=status.HTTP_201_CREATED
)
async def create_additional_income(
    payload: AdditionalIncomeCreate,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> AdditionalIncomeResponse:
    try:
        created = await service.create_additional_income(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    cache.invalidate_table(AdditionalIncome.__tablename__)
    return created


@router.get("/additional-income", response_model=List[AdditionalIncomeResponse])
async def list_additional_income(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: AsyncSession = Depends(get_db),
) -> List[AdditionalIncomeResponse]:
    return await service.list_additional_income(db, date_from=date_from, date_to=date_to)


@router.put("/additional-income/{income_id}", response_model=AdditionalIncomeResponse)
async def update_additional_income(
    income_id: UUID,
    payload: AdditionalIncomeUpdate,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> AdditionalIncomeResponse:
    try:
        updated = await service.update_additional_income(db, income_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    cache.invalidate_table(AdditionalIncome.__tablename__)
    return updated


@router.delete("/additional-income/{income_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_additional_income(
    income_id: UUID,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> Response:
    try:
        await service.delete_additional_income(db, income_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    cache.invalidate_table(AdditionalIncome.__tablename__)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
