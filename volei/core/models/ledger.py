"""Club bookkeeping entries not tied to a student."""

import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Numeric, Text, Uuid

from volei.db.session import Base


class CourtExpense(Base):
    """Recurring court rent, keyed by the first day of the month it covers."""

    __tablename__ = "court_expenses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    amount = Column(Numeric(10, 2), nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    payment_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class ExtraExpense(Base):
    __tablename__ = "extra_expenses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    amount = Column(Numeric(10, 2), nullable=False)
    date = Column(Date, nullable=False, index=True)
    payment_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class AdditionalIncome(Base):
    """Revenue outside membership dues (tournaments, sponsorship, ...)."""

    __tablename__ = "additional_income"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    amount = Column(Numeric(10, 2), nullable=False)
    date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
