# cao_model/normalization/extract.py
"""
Value extraction from externally sourced history rows.

History rows carry a cached value (``salary_at_event`` / ``hours_at_event``)
that is often empty, plus ``new_value`` / ``previous_value`` payloads that
may be dicts, JSON strings or bare numbers. Values are looked up in that
order and the first positive number wins.
"""

import json
import logging
from typing import Any, Mapping, NamedTuple, Optional, Sequence

logger = logging.getLogger(__name__)

SALARY_FIELDS = (
    "monthly_wage",
    "monthlyWage",
    "salary",
    "gross_monthly",
    "grossMonthly",
    "bruto",
)

HOURS_FIELDS = (
    "hours_per_week",
    "hoursPerWeek",
    "hours",
    "weekly_hours",
    "weeklyHours",
)

SOURCE_CACHE = "timeline_cache"
SOURCE_NEW_VALUE = "new_value"
SOURCE_PREVIOUS_VALUE = "previous_value"
SOURCE_NOT_FOUND = "not_found"


class Extracted(NamedTuple):
    value: Optional[float]
    source: str


def _positive_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number <= 0:  # NaN or non-positive
        return None
    return number


def parse_payload(payload: Any) -> Any:
    """Decode a JSON string payload; other values are returned unchanged."""
    if isinstance(payload, str):
        text = payload.strip()
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text
    return payload


def value_from_payload(payload: Any, fields: Sequence[str]) -> Optional[float]:
    """First positive number in ``payload`` under one of ``fields``.

    A payload that is itself a number (or numeric string) is returned as is.
    """
    data = parse_payload(payload)
    if data is None:
        return None
    if isinstance(data, Mapping):
        for name in fields:
            number = _positive_number(data.get(name))
            if number is not None:
                return number
        logger.debug("No field of %s in payload keys %s", fields, list(data.keys()))
        return None
    return _positive_number(data)


def _extract(row: Mapping[str, Any], cache_field: str, fields: Sequence[str]) -> Extracted:
    cached = _positive_number(row.get(cache_field))
    if cached is not None:
        return Extracted(cached, SOURCE_CACHE)
    for source in (SOURCE_NEW_VALUE, SOURCE_PREVIOUS_VALUE):
        number = value_from_payload(row.get(source), fields)
        if number is not None:
            return Extracted(number, source)
    return Extracted(None, SOURCE_NOT_FOUND)


def extract_salary(row: Mapping[str, Any]) -> Extracted:
    return _extract(row, "salary_at_event", SALARY_FIELDS)


def extract_hours(row: Mapping[str, Any]) -> Extracted:
    return _extract(row, "hours_at_event", HOURS_FIELDS)
