"""Payments API router."""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from volei.auth.dependencies import get_current_user
from volei.core.cache import QueryCache, get_query_cache
from volei.core.enums import ExportFormat
from volei.core.exceptions import ServiceError
from volei.core.models import Payment
from volei.db.session import get_db

from . import service
from .schemas import PaymentCreate, PaymentResponse, PaymentUpdate

router = APIRouter(
    prefix="/api/v1/payments",
    tags=["payments"],
    dependencies=[Depends(get_current_user)],
)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> PaymentResponse:
    """Register a monthly payment. payment_date is kept only for paid payments."""
    try:
        created = await service.create_payment(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    cache.invalidate_table(Payment.__tablename__)
    return created


@router.get("", response_model=List[PaymentResponse])
async def list_payments(
    due_from: Optional[date] = Query(None, description="Earliest due_date (inclusive)"),
    due_to: Optional[date] = Query(None, description="Latest due_date (inclusive)"),
    student_id: Optional[UUID] = None,
    db: AsyncSession = Depends(get_db),
) -> List[PaymentResponse]:
    return await service.list_payments(db, due_from=due_from, due_to=due_to, student_id=student_id)


@router.get("/history", response_model=List[PaymentResponse])
async def payment_history(db: AsyncSession = Depends(get_db)) -> List[PaymentResponse]:
    """All payments, newest due_date first."""
    return await service.list_payments(db, newest_first=True)


@router.get("/history/export")
async def export_payment_history(
    export_format: ExportFormat = Query(ExportFormat.csv, alias="format"),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Download the payment history as CSV or Excel."""
    payments = await service.list_payments(db, newest_first=True)
    if export_format is ExportFormat.xlsx:
        return Response(
            content=service.build_history_xlsx(payments),
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": "attachment; filename=historico_pagamentos.xlsx"},
        )
    return Response(
        content=service.build_history_csv(payments),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": "attachment; filename=historico_pagamentos.csv"},
    )


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> PaymentResponse:
    try:
        return await service.get_payment(db, payment_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: UUID,
    payload: PaymentUpdate,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> PaymentResponse:
    try:
        updated = await service.update_payment(db, payment_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    cache.invalidate_table(Payment.__tablename__)
    return updated


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment(
    payment_id: UUID,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> Response:
    try:
        await service.delete_payment(db, payment_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    cache.invalidate_table(Payment.__tablename__)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
