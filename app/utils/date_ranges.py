# app/utils/date_ranges.py
"""
Date-range helpers for the booking engine.

Rental intervals are whole calendar days. Overlap is inclusive on both ends
unless BOOKING_SAME_DAY_TURNOVER is enabled, in which case a rental may start
on the day another one ends.
"""

import math
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Union
from sqlalchemy import and_
from app.config import settings

DateLike = Union[date, datetime, str]

_CENT = Decimal("0.01")
_ONE_DAY = timedelta(days=1)


def today() -> date:
    """Current calendar date; the single clock used by booking rules."""
    return date.today()


def to_date(value: DateLike) -> date:
    """Coerce a date, datetime or ISO-8601 string to a date (time dropped)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()


def rental_days(start: DateLike, end: DateLike) -> int:
    """Number of billable days: ceil((end - start) / 1 day)."""
    if isinstance(start, datetime) and isinstance(end, datetime):
        return math.ceil((end - start) / _ONE_DAY)
    return (to_date(end) - to_date(start)).days


def round_money(value) -> Decimal:
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def intervals_overlap(a_start: date, a_end: date, b_start: date, b_end: date,
                      same_day_turnover: bool = None) -> bool:
    """
    True when [a_start, a_end] and [b_start, b_end] share a day.
    Touching intervals (a_end == b_start) overlap unless same-day turnover is allowed.
    """
    if same_day_turnover is None:
        same_day_turnover = settings.BOOKING_SAME_DAY_TURNOVER
    if same_day_turnover:
        return a_start < b_end and a_end > b_start
    return a_start <= b_end and a_end >= b_start


def overlap_clause(start_column, end_column, start: date, end: date):
    """SQLAlchemy filter equivalent of intervals_overlap() against stored columns."""
    if settings.BOOKING_SAME_DAY_TURNOVER:
        return and_(start_column < end, end_column > start)
    return and_(start_column <= end, end_column >= start)
