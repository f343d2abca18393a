"""Date manipulation utilities"""

import calendar
from datetime import date, timedelta
from typing import Iterator, List, Tuple


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, pulling day 29-31 back to the last day of short months"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    """(year, month) moved by offset calendar months"""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def add_months(from_date: date, months: int) -> date:
    """Same day-of-month `months` later, clamped to the target month's length"""
    year, month = shift_month(from_date.year, from_date.month, months)
    return clamp_day(year, month, from_date.day)


def months_between(start: date, year: int, month: int) -> int:
    """Whole calendar months from start's month to (year, month); negative if earlier"""
    return (year - start.year) * 12 + (month - start.month)


def iter_months(first: date, last: date) -> Iterator[Tuple[int, int]]:
    """Yield (year, month) for every calendar month touched by [first, last]"""
    year, month = first.year, first.month
    while (year, month) <= (last.year, last.month):
        yield year, month
        year, month = shift_month(year, month, 1)
