"""Brazilian Portuguese presentation helpers used by exports and chart labels."""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from volei.core.enums import PaymentStatus

MONTH_ABBREVIATIONS = ("jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez")

PAYMENT_STATUS_LABELS = {
    PaymentStatus.paid: "Pago",
    PaymentStatus.pending: "Pendente",
    PaymentStatus.overdue: "Atrasado",
}

_CENT = Decimal("0.01")


def format_currency(value: Union[Decimal, int, float, str]) -> str:
    """Format as BRL: 1234.5 -> 'R$ 1.234,50'."""
    amount = Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    integer, _, cents = f"{abs(amount):.2f}".partition(".")
    grouped = f"{int(integer):,}".replace(",", ".")
    return f"{sign}R$ {grouped},{cents}"


def format_date(value: Optional[date]) -> str:
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")


def payment_status_label(status: Union[PaymentStatus, str]) -> str:
    return PAYMENT_STATUS_LABELS[PaymentStatus(status)]


def month_label(month: int) -> str:
    return MONTH_ABBREVIATIONS[month - 1]


def rounded_percent(part: int, whole: int) -> int:
    """part / whole as an integer percent, rounded half up. whole must be positive."""
    return (part * 200 + whole) // (whole * 2)
