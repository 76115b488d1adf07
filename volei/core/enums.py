from enum import Enum


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    overdue = "overdue"


class StudentFilter(str, Enum):
    active = "active"
    inactive = "inactive"
    all = "all"


class ExportFormat(str, Enum):
    csv = "csv"
    xlsx = "xlsx"


class PaymentStanding(str, Enum):
    """Standing of a student shown on the dashboard, derived from their latest payment."""

    CURRENT = "current"
    PENDING = "pending"
    OVERDUE = "overdue"
    NONE = "no-payments"

    @property
    def label(self) -> str:
        return _STANDING_LABELS[self]

    @property
    def color(self) -> str:
        return _STANDING_COLORS[self]


_STANDING_LABELS = {
    PaymentStanding.CURRENT: "Em dia",
    PaymentStanding.PENDING: "Pendente",
    PaymentStanding.OVERDUE: "Atrasado",
    PaymentStanding.NONE: "Sem pagamentos",
}

_STANDING_COLORS = {
    PaymentStanding.CURRENT: "green",
    PaymentStanding.PENDING: "yellow",
    PaymentStanding.OVERDUE: "red",
    PaymentStanding.NONE: "red",
}
