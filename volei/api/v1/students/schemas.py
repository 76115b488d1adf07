from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator


class StudentCreate(BaseModel):
    """Registration form. inactive_reason is kept only when active is false."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    birth_date: Optional[date] = None
    active: bool = True
    inactive_reason: Optional[str] = None

    @field_validator("name", "phone")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class StudentUpdate(BaseModel):
    """Edit form. Setting active=false records inactive_date (today if not given)."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    birth_date: Optional[date] = None
    active: Optional[bool] = None
    inactive_reason: Optional[str] = None
    inactive_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class StudentResponse(BaseModel):
    id: UUID
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    active: bool
    inactive_reason: Optional[str] = None
    inactive_date: Optional[date] = None
    created_at: datetime

    class Config:
        from_attributes = True


class StudentCountResponse(BaseModel):
    total: int
    active: int
    inactive: int
