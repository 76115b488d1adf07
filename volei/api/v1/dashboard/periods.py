"""
Monthly financial buckets for the dashboard charts.

The window is the N calendar months ending with today's month. Rows are
bucketed by their own date field (due_date for payments and court expenses,
date for extra expenses and additional income), truncated to (year, month).
A row outside the window, or dated after today, is dropped. Every month in
the window yields a bucket, even with no rows.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from volei.core.enums import PaymentStatus
from volei.core.formatting import month_label

from .standing import payment_status_of, row_value

YearMonth = Tuple[int, int]

ZERO = Decimal("0")


@dataclass(frozen=True)
class MonthBucket:
    year: int
    month: int
    revenue: Decimal = ZERO
    expenses: Decimal = ZERO
    paid: Decimal = ZERO
    pending: Decimal = ZERO
    overdue: Decimal = ZERO
    students_paid: int = 0
    students_unpaid: int = 0

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def label(self) -> str:
        return month_label(self.month)

    @property
    def balance(self) -> Decimal:
        return self.revenue - self.expenses


class _Accumulator:
    def __init__(self) -> None:
        self.revenue = ZERO
        self.expenses = ZERO
        self.paid = ZERO
        self.pending = ZERO
        self.overdue = ZERO
        self.paid_students: Set[Any] = set()
        self.unpaid_students: Set[Any] = set()

    def to_bucket(self, year_month: YearMonth) -> MonthBucket:
        year, month = year_month
        return MonthBucket(
            year=year,
            month=month,
            revenue=self.revenue,
            expenses=self.expenses,
            paid=self.paid,
            pending=self.pending,
            overdue=self.overdue,
            students_paid=len(self.paid_students),
            students_unpaid=len(self.unpaid_students),
        )


def month_window(months: int, today: date) -> List[YearMonth]:
    """The `months` (year, month) pairs ending with today's month, oldest first."""
    if months < 1:
        raise ValueError("months must be at least 1")
    last = today.year * 12 + today.month - 1
    window = []
    for index in range(last - months + 1, last + 1):
        year, month0 = divmod(index, 12)
        window.append((year, month0 + 1))
    return window


def window_start(months: int, today: date) -> date:
    """First day of the oldest month in the window."""
    year, month = month_window(months, today)[0]
    return date(year, month, 1)


def _amount(row: Any) -> Decimal:
    value = row_value(row, "amount")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _slot(
    buckets: Dict[YearMonth, _Accumulator],
    day: Optional[date],
    today: date,
) -> Optional[_Accumulator]:
    if day is None or day > today:
        return None
    return buckets.get((day.year, day.month))


def aggregate_periods(
    months: int,
    today: date,
    payments: Iterable[Any] = (),
    court_expenses: Iterable[Any] = (),
    extra_expenses: Iterable[Any] = (),
    additional_income: Iterable[Any] = (),
) -> List[MonthBucket]:
    """
    Build exactly `months` buckets in chronological order.

    revenue = paid payments + additional income
    expenses = court expenses + extra expenses
    paid/pending/overdue are payment subtotals; students_paid/unpaid count
    distinct students with a paid / a pending-or-overdue payment that month.
    """
    window = month_window(months, today)
    buckets: Dict[YearMonth, _Accumulator] = {ym: _Accumulator() for ym in window}

    for payment in payments:
        slot = _slot(buckets, row_value(payment, "due_date"), today)
        if slot is None:
            continue
        amount = _amount(payment)
        student_id = row_value(payment, "student_id")
        status = payment_status_of(payment)
        if status is PaymentStatus.paid:
            slot.paid += amount
            slot.revenue += amount
            if student_id is not None:
                slot.paid_students.add(student_id)
        elif status is PaymentStatus.pending:
            slot.pending += amount
            if student_id is not None:
                slot.unpaid_students.add(student_id)
        elif status is PaymentStatus.overdue:
            slot.overdue += amount
            if student_id is not None:
                slot.unpaid_students.add(student_id)

    for expense in court_expenses:
        slot = _slot(buckets, row_value(expense, "due_date"), today)
        if slot is not None:
            slot.expenses += _amount(expense)

    for expense in extra_expenses:
        slot = _slot(buckets, row_value(expense, "date"), today)
        if slot is not None:
            slot.expenses += _amount(expense)

    for income in additional_income:
        slot = _slot(buckets, row_value(income, "date"), today)
        if slot is not None:
            slot.revenue += _amount(income)

    return [buckets[ym].to_bucket(ym) for ym in sorted(window)]
