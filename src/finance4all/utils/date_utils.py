"""
Date utilities for parsing periods and date ranges.

Ranges are inclusive and expressed as naive datetimes: the start is
midnight of the first day, the end is the last microsecond of the last day.
"""

import calendar
from datetime import datetime, time, timedelta
from typing import Tuple

DateRange = Tuple[datetime, datetime]

PERIODS = (
    "this_month",
    "last_month",
    "this_year",
    "last_year",
    "last_7_days",
    "last_30_days",
    "last_90_days",
    "ytd",
)


def parse_period(period: str) -> DateRange:
    """
    Parse a period string into (start, end).

    Supported periods:
    - "this_month", "last_month"
    - "this_year", "last_year"
    - "last_7_days", "last_30_days", "last_90_days"
    - "ytd" (year to date)

    Raises:
        ValueError: If period is not recognized
    """
    today = datetime.now()

    if period == "this_month":
        return get_month_range(today.year, today.month)

    elif period == "last_month":
        first_day_this_month = today.replace(day=1)
        last_day_last_month = first_day_this_month - timedelta(days=1)
        return get_month_range(last_day_last_month.year, last_day_last_month.month)

    elif period == "this_year":
        return _start_of_day(datetime(today.year, 1, 1)), _end_of_day(datetime(today.year, 12, 31))

    elif period == "last_year":
        year = today.year - 1
        return _start_of_day(datetime(year, 1, 1)), _end_of_day(datetime(year, 12, 31))

    elif period in ("last_7_days", "last_30_days", "last_90_days"):
        days = int(period.split("_")[1])
        return _start_of_day(today - timedelta(days=days)), _end_of_day(today)

    elif period == "ytd":
        return get_year_to_date_range()

    else:
        raise ValueError(f"Unknown period: {period}")


def get_month_range(year: int, month: int) -> DateRange:
    """
    Get the date range for a specific month.

    Raises:
        ValueError: If month is not in valid range (1-12)
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")

    _, last_day = calendar.monthrange(year, month)
    return _start_of_day(datetime(year, month, 1)), _end_of_day(datetime(year, month, last_day))


def get_current_month_range() -> DateRange:
    today = datetime.now()
    return get_month_range(today.year, today.month)


def get_year_to_date_range() -> DateRange:
    """From January 1st of this year until now."""
    now = datetime.now()
    return datetime(now.year, 1, 1), now


def get_date_range(months: int) -> DateRange:
    """From the same moment ``months`` months ago until now."""
    now = datetime.now()
    return shift_months(now, -months), now


def shift_months(value: datetime, months: int) -> datetime:
    """Move a datetime by whole months, clamping the day to the target month."""
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def month_key(value: datetime) -> str:
    """YYYY-MM key used to bucket values by month."""
    return value.strftime("%Y-%m")


def _start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def _end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max)
