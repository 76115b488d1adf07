import datetime as dt
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from volei.core.dates import REFERENCE_MONTH_PATTERN, first_of_month, parse_reference_month


def _required_text(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


# ----- Court expenses -----
class CourtExpenseCreate(BaseModel):
    """Monthly court rent. due_date is stored as the first of its month."""

    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    due_date: Optional[dt.date] = None
    reference_month: Optional[str] = Field(None, pattern=REFERENCE_MONTH_PATTERN, description="e.g. 2024-03")
    payment_date: Optional[dt.date] = None
    description: Optional[str] = None

    @model_validator(mode="after")
    def resolve_due_date(self) -> "CourtExpenseCreate":
        if self.reference_month:
            self.due_date = parse_reference_month(self.reference_month)
        if self.due_date is None:
            raise ValueError("due_date or reference_month is required")
        self.due_date = first_of_month(self.due_date)
        return self


class CourtExpenseUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    due_date: Optional[dt.date] = None
    payment_date: Optional[dt.date] = None
    description: Optional[str] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: Optional[dt.date]) -> Optional[dt.date]:
        return first_of_month(v) if v else v


class CourtExpenseResponse(BaseModel):
    id: UUID
    amount: Decimal
    due_date: dt.date
    payment_date: Optional[dt.date] = None
    description: Optional[str] = None
    created_at: dt.datetime

    class Config:
        from_attributes = True


# ----- Extra expenses -----
class ExtraExpenseCreate(BaseModel):
    """One-off expense (balls, nets, ...). payment_date defaults to date."""

    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    date: dt.date
    description: str = Field(..., min_length=1)
    payment_date: Optional[dt.date] = None

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return _required_text(v)


class ExtraExpenseUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    date: Optional[dt.date] = None
    description: Optional[str] = Field(None, min_length=1)
    payment_date: Optional[dt.date] = None

    @field_validator("description")
    @classmethod
    def require_description(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("description cannot be removed")
        return _required_text(v)


class ExtraExpenseResponse(BaseModel):
    id: UUID
    amount: Decimal
    date: dt.date
    payment_date: Optional[dt.date] = None
    description: Optional[str] = None
    created_at: dt.datetime

    class Config:
        from_attributes = True


# ----- Additional income -----
class AdditionalIncomeCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    date: dt.date
    description: str = Field(..., min_length=1)

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return _required_text(v)


class AdditionalIncomeUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    date: Optional[dt.date] = None
    description: Optional[str] = Field(None, min_length=1)

    @field_validator("description")
    @classmethod
    def require_description(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("description cannot be removed")
        return _required_text(v)


class AdditionalIncomeResponse(BaseModel):
    id: UUID
    amount: Decimal
    date: dt.date
    description: Optional[str] = None
    created_at: dt.datetime

    class Config:
        from_attributes = True
