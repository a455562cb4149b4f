"""
utils.py
Calendar-date helpers shared by the status engine and the cycle advancer.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime


def parse_iso(d) -> date:
    """
    Parse 'YYYY-MM-DD' into a date. Full ISO timestamps ('2024-03-15T00:00:00.000Z')
    are truncated to their calendar date.
    """
    if isinstance(d, datetime):
        return d.date()
    if isinstance(d, date):
        return d
    return date.fromisoformat(str(d).strip()[:10])


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(start: date, months: int) -> date:
    """
    Shift a due date by whole calendar months. A billing day the target month
    lacks is clamped to that month's last day (Jan 31 -> Feb 29 in 2024), so a
    cycle never skips into the following month.
    """
    y = start.year + (start.month - 1 + months) // 12
    m = (start.month - 1 + months) % 12 + 1
    day = min(start.day, last_day_of_month(y, m))
    return date(y, m, day)


def add_years(start: date, years: int) -> date:
    """
    Add years, clamping Feb 29 to Feb 28 in non-leap target years.
    """
    y = start.year + years
    day = min(start.day, last_day_of_month(y, start.month))
    return date(y, start.month, day)


def due_date(year: int, month: int, anchor_day: int) -> date:
    # anchor 31 in a 30-day month falls on the 30th, never in the next month
    return date(year, month, min(anchor_day, last_day_of_month(year, month)))