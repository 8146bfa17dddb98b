# utils/date_utils.py

"""Date utility functions for wage lookups and employment timelines."""

from datetime import date, datetime
from typing import Any, Optional, Union

import pandas as pd  # type: ignore[import-untyped]
from dateutil.relativedelta import relativedelta

# Upstream payroll exports use this value for "no end date"
NULL_DATE_SENTINEL = date(1, 1, 1)

DateLike = Union[date, datetime, pd.Timestamp, str]


def to_date(value: Any) -> Optional[date]:
    """
    Coerce a date-like value into a ``datetime.date``.

    - None, NaT, empty strings and the ``0001-01-01`` sentinel become None.
    - Strings are parsed as ISO dates; a time component is discarded.

    Raises:
        ValueError: If a non-empty value cannot be parsed.
    """
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if value.startswith("0001-01-01"):
            return None
    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            return None
        result = value.date()
    elif isinstance(value, datetime):
        result = value.date()
    elif isinstance(value, date):
        result = value
    else:
        ts = pd.to_datetime(value, errors="raise")
        if pd.isna(ts):
            return None
        result = ts.date()
    if result == NULL_DATE_SENTINEL:
        return None
    return result


def today() -> date:
    return date.today()


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end (negative if end < start)."""
    delta = relativedelta(end, start)
    return delta.years * 12 + delta.months


def humanize_span(start: date, end: date) -> str:
    """Describe the distance between two dates as e.g. ``2 years, 3 months``."""
    delta = relativedelta(end, start)
    parts = []
    if delta.years:
        parts.append(f"{delta.years} year{'s' if delta.years != 1 else ''}")
    if delta.months:
        parts.append(f"{delta.months} month{'s' if delta.months != 1 else ''}")
    if not parts:
        days = (end - start).days
        parts.append(f"{days} day{'s' if days != 1 else ''}")
    return ", ".join(parts)
