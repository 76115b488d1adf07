"""
Derive a student's standing from their payments.

The payment with the latest due_date decides:
  paid -> current, pending -> pending, overdue -> overdue, none -> no-payments.
Only a missing payment or an overdue one needs attention; pending does not.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

from volei.core.enums import PaymentStanding, PaymentStatus

_STANDING_BY_STATUS = {
    PaymentStatus.paid: PaymentStanding.CURRENT,
    PaymentStatus.pending: PaymentStanding.PENDING,
    PaymentStatus.overdue: PaymentStanding.OVERDUE,
}


def row_value(row: Any, name: str) -> Any:
    """Read a column from an ORM row, a schema object or a plain mapping."""
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


def payment_status_of(row: Any) -> Optional[PaymentStatus]:
    """Status of a payment row; a missing status counts as pending (the column default)."""
    value = row_value(row, "status")
    if value is None:
        return PaymentStatus.pending
    try:
        return PaymentStatus(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class StandingResult:
    standing: PaymentStanding
    needs_attention: bool
    latest_due_date: Optional[date] = None


def latest_payment(payments: Iterable[Any]) -> Optional[Any]:
    """Payment with the greatest due_date. Ties keep the first one seen."""
    latest = None
    for payment in payments:
        if latest is None or row_value(payment, "due_date") > row_value(latest, "due_date"):
            latest = payment
    return latest


def derive_standing(payments: Iterable[Any]) -> StandingResult:
    latest = latest_payment(payments)
    if latest is None:
        return StandingResult(standing=PaymentStanding.NONE, needs_attention=True)

    status = payment_status_of(latest)
    # Unknown statuses (not writable through the API) read as pending
    standing = _STANDING_BY_STATUS.get(status, PaymentStanding.PENDING)
    return StandingResult(
        standing=standing,
        needs_attention=standing is PaymentStanding.OVERDUE,
        latest_due_date=row_value(latest, "due_date"),
    )
