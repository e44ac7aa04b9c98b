"""Date manipulation utilities"""

import calendar
from datetime import date
from typing import Tuple


def add_months(from_date: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's length"""
    month_index = from_date.year * 12 + (from_date.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(from_date.day, last_day))


def one_month_window(today: date | None = None, months: int = 1) -> Tuple[date, date]:
    """Rolling window ending today (inclusive) and starting `months` months earlier"""
    end = today or date.today()
    return add_months(end, -months), end


def month_key(day: date) -> str:
    """Calendar month label, e.g. 2025-04"""
    return f"{day.year:04d}-{day.month:02d}"


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end (never negative)"""
    return max(0, (end.year - start.year) * 12 + (end.month - start.month))
