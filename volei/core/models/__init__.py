from volei.core.models.student import Student
from volei.core.models.payment import Payment
from volei.core.models.ledger import AdditionalIncome, CourtExpense, ExtraExpense
from volei.core.models.attendance import Attendance

__all__ = [
    "AdditionalIncome",
    "Attendance",
    "CourtExpense",
    "ExtraExpense",
    "Payment",
    "Student",
]
