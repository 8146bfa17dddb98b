# cao_model/timeline/summary.py
"""
Derived timeline summary: employment span and data-quality confidence.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional, Sequence

from cao_model.normalization.events import ChangeEvent
from cao_model.schema import (
    EVT_CONTRACT_END,
    EVT_CONTRACT_START,
    EVT_SALARY_CHANGE,
)
from cao_model.utils.date_utils import humanize_span, months_between

SOURCE_EMPLOYES_SYNC = "employes_sync"
SOURCE_CONTRACT_GENERATED = "contract_generated"
SOURCE_MANUAL_ENTRY = "manual_entry"
SOURCE_UNKNOWN = "unknown"

# Higher wins
SOURCE_PRIORITY: Dict[str, int] = {
    SOURCE_EMPLOYES_SYNC: 3,
    SOURCE_CONTRACT_GENERATED: 2,
    SOURCE_MANUAL_ENTRY: 1,
    SOURCE_UNKNOWN: 0,
}

CONFIDENCE_VERIFIED = "verified"
CONFIDENCE_CALCULATED = "calculated"
CONFIDENCE_MANUAL = "manual"
CONFIDENCE_INCOMPLETE = "incomplete"


@dataclass(frozen=True)
class EmploymentSpan:
    start: date
    end: date
    days: int
    years: int
    months: int
    human: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "days": self.days,
            "years": self.years,
            "months": self.months,
            "human": self.human,
        }


@dataclass(frozen=True)
class DataQuality:
    source: str
    confidence: str
    has_salary_data: bool
    has_history_data: bool
    low_confidence_events: int


@dataclass(frozen=True)
class TimelineSummary:
    active_count: int
    total_span: Optional[EmploymentSpan]
    data_quality: DataQuality

    def to_dict(self) -> Dict[str, Any]:
        dq = self.data_quality
        return {
            "active_count": self.active_count,
            "total_span": self.total_span.to_dict() if self.total_span else None,
            "data_quality": {
                "source": dq.source,
                "confidence": dq.confidence,
                "has_salary_data": dq.has_salary_data,
                "has_history_data": dq.has_history_data,
                "low_confidence_events": dq.low_confidence_events,
            },
        }


def employment_span(events: Sequence[ChangeEvent], now: date) -> Optional[EmploymentSpan]:
    """
    Oldest contract start to latest contract end, or to ``now`` while any
    contract start is current. Falls back to the event dates when no
    contract events exist.
    """
    starts = [e for e in events if e.event_type == EVT_CONTRACT_START and e.date]
    dated = [e.date for e in events if e.date]
    if not dated:
        return None

    start = min(e.date for e in starts) if starts else min(dated)
    still_open = any(e.is_current for e in starts)
    ends = [e.date for e in events if e.event_type == EVT_CONTRACT_END and e.date]
    if still_open:
        end = now
    elif ends:
        end = max(ends)
    else:
        end = max(dated)
    if end < start:
        end = start

    total_months = months_between(start, end)
    return EmploymentSpan(
        start=start,
        end=end,
        days=(end - start).days,
        years=total_months // 12,
        months=total_months % 12,
        human=humanize_span(start, end),
    )


def dominant_source(events: Sequence[ChangeEvent]) -> str:
    """Highest-priority known source among the events."""
    best = SOURCE_UNKNOWN
    for event in events:
        if SOURCE_PRIORITY.get(event.source, 0) > SOURCE_PRIORITY[best]:
            best = event.source
    return best


def assess_data_quality(events: Sequence[ChangeEvent]) -> DataQuality:
    source = dominant_source(events)
    has_salary = any(
        e.event_type == EVT_SALARY_CHANGE
        and any(isinstance(v, (int, float)) for v in e.current_value.values())
        for e in events
    )
    has_history = any(e.event_type != EVT_SALARY_CHANGE for e in events)

    if source == SOURCE_EMPLOYES_SYNC and has_salary and has_history:
        confidence = CONFIDENCE_VERIFIED
    elif source == SOURCE_CONTRACT_GENERATED and has_salary:
        confidence = CONFIDENCE_CALCULATED
    elif source == SOURCE_MANUAL_ENTRY:
        confidence = CONFIDENCE_MANUAL
    else:
        confidence = CONFIDENCE_INCOMPLETE

    return DataQuality(
        source=source,
        confidence=confidence,
        has_salary_data=has_salary,
        has_history_data=has_history,
        low_confidence_events=sum(1 for e in events if e.low_confidence),
    )
