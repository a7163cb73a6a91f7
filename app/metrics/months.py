"""Calendar month helpers."""
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta


def month_key(value: date) -> str:
    """Format a date as its YYYY-MM month key."""
    return f"{value.year:04d}-{value.month:02d}"


def add_months(value: date, months: int) -> date:
    """First day of the month `months` away from the month containing `value`."""
    return value.replace(day=1) + relativedelta(months=months)


def trailing_months(count: int, today: date | None = None) -> list[date]:
    """First days of the `count` months ending at the current month, oldest first."""
    today = today or date.today()
    return [add_months(today, -offset) for offset in range(count - 1, -1, -1)]


def month_bounds(month_start: date) -> tuple[date, date]:
    """First and last day of the month starting at `month_start`."""
    first = month_start.replace(day=1)
    last = add_months(first, 1) - timedelta(days=1)
    return first, last
