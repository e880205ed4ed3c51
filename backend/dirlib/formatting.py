"""Display formatting for salaries and dates (en-US)."""
from datetime import timezone
from typing import Any

from .comparators import parse_timestamp

_MONTHS = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
           'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')


def format_salary(salary: Any) -> str:
    """USD with thousands separators and no fraction digits, e.g. "$60,000"."""
    try:
        amount = round(float(salary))
    except (TypeError, ValueError, OverflowError):
        return '$NaN'
    sign = '-' if amount < 0 else ''
    return f"{sign}${abs(amount):,}"


def format_date(value: Any) -> str:
    """Short UTC date such as "Jun 10, 2024"; unparseable input gives "Invalid Date"."""
    dt = parse_timestamp(value)
    if dt is None:
        return 'Invalid Date'
    dt = dt.astimezone(timezone.utc)
    return f"{_MONTHS[dt.month - 1]} {dt.day}, {dt.year}"
