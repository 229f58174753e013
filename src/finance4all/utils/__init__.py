"""
Utility functions for Finance4All.
"""

from finance4all.utils.date_utils import (
    get_current_month_range,
    get_date_range,
    get_month_range,
    get_year_to_date_range,
    parse_period,
)

__all__ = [
    "parse_period",
    "get_month_range",
    "get_current_month_range",
    "get_date_range",
    "get_year_to_date_range",
]
