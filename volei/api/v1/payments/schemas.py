from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from volei.core.dates import REFERENCE_MONTH_PATTERN, first_of_month, parse_reference_month
from volei.core.enums import PaymentStatus


class PaymentCreate(BaseModel):
    """
    Register one student's monthly due. Pass either due_date (any day of the billed
    month) or reference_month (YYYY-MM); the stored due_date is the first of the month.
    """

    student_id: UUID
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    due_date: Optional[date] = None
    reference_month: Optional[str] = Field(None, pattern=REFERENCE_MONTH_PATTERN, description="e.g. 2024-03")
    status: PaymentStatus = PaymentStatus.pending
    payment_date: Optional[date] = Field(None, description="Ignored unless status is paid; defaults to today")

    @model_validator(mode="after")
    def resolve_due_date(self) -> "PaymentCreate":
        if self.reference_month:
            self.due_date = parse_reference_month(self.reference_month)
        if self.due_date is None:
            raise ValueError("due_date or reference_month is required")
        self.due_date = first_of_month(self.due_date)
        return self


class PaymentUpdate(BaseModel):
    student_id: Optional[UUID] = None
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    due_date: Optional[date] = None
    reference_month: Optional[str] = Field(None, pattern=REFERENCE_MONTH_PATTERN)
    status: Optional[PaymentStatus] = None
    payment_date: Optional[date] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: Optional[date]) -> Optional[date]:
        return first_of_month(v) if v else v

    @model_validator(mode="after")
    def resolve_reference_month(self) -> "PaymentUpdate":
        if self.reference_month:
            self.due_date = parse_reference_month(self.reference_month)
        return self


class PaymentResponse(BaseModel):
    id: UUID
    student_id: Optional[UUID] = None
    student_name: Optional[str] = None
    amount: Decimal
    due_date: date
    payment_date: Optional[date] = None
    status: PaymentStatus
    created_at: datetime

    class Config:
        from_attributes = True
