from calendar import monthrange
from datetime import date

REFERENCE_MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


def first_of_month(value: date) -> date:
    return value.replace(day=1)


def last_of_month(value: date) -> date:
    return value.replace(day=monthrange(value.year, value.month)[1])


def parse_reference_month(value: str) -> date:
    """'2024-03' -> 2024-03-01."""
    year, month = value.split("-")
    return date(int(year), int(month), 1)
