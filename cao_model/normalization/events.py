# cao_model/normalization/events.py
"""
ChangeEvent: one dated change in a person's employment.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from cao_model.exceptions import DataQualityWarning, data_quality_warning
from cao_model.schema import (
    EVT_CONTRACT_CONVERSION,
    EVT_CONTRACT_END,
    EVT_CONTRACT_START,
    EVT_HOURS_CHANGE,
    EVT_SALARY_CHANGE,
)


class EventType(str, Enum):
    """Known change-event types. Other strings are allowed on ChangeEvent."""
    CONTRACT_START = EVT_CONTRACT_START
    CONTRACT_END = EVT_CONTRACT_END
    CONTRACT_CONVERSION = EVT_CONTRACT_CONVERSION
    SALARY_CHANGE = EVT_SALARY_CHANGE
    HOURS_CHANGE = EVT_HOURS_CHANGE


@dataclass(frozen=True)
class ChangeEvent:
    entity_id: str
    date: Optional[date]
    event_type: str
    current_value: Dict[str, Any] = field(default_factory=dict)
    previous_value: Optional[Dict[str, Any]] = None
    percent_change: Optional[float] = None
    is_current: bool = False
    source: str = "unknown"
    record_id: Optional[str] = None
    low_confidence: bool = False
    notes: Tuple[str, ...] = ()

    @property
    def key(self) -> Tuple[str, str, Optional[date]]:
        """Identity used for deduplication across sources."""
        return (self.entity_id, self.event_type, self.date)

    def with_current(self, is_current: bool) -> "ChangeEvent":
        return replace(self, is_current=is_current)

    def with_note(self, note: str) -> "ChangeEvent":
        return replace(self, notes=self.notes + (note,))

    def same_payload(self, other: "ChangeEvent") -> bool:
        return (
            self.current_value == other.current_value
            and self.previous_value == other.previous_value
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "date": self.date.isoformat() if self.date else None,
            "event_type": self.event_type,
            "previous_value": self.previous_value,
            "current_value": self.current_value,
            "percent_change": self.percent_change,
            "is_current": self.is_current,
            "source": self.source,
            "record_id": self.record_id,
            "low_confidence": self.low_confidence,
            "notes": list(self.notes),
        }


def _date_key(event: ChangeEvent) -> date:
    return event.date or date.min


def active_contract_keys(events: Iterable[ChangeEvent]) -> Set[Tuple[str, str, Optional[date]]]:
    """Keys of dated contract_start events currently flagged current."""
    return {
        e.key
        for e in events
        if e.event_type == EVT_CONTRACT_START and e.is_current and e.date is not None
    }


def enforce_single_current(
    events: List[ChangeEvent],
) -> Tuple[List[ChangeEvent], List[DataQualityWarning]]:
    """
    Keep is_current on at most one event per (entity, type).

    When several are flagged, the latest-dated one keeps the flag (the last
    in input order on equal dates). Input order is preserved.
    """
    winners: Dict[Tuple[str, str], int] = {}
    counts: Dict[Tuple[str, str], int] = {}
    for i, event in enumerate(events):
        if not event.is_current:
            continue
        group = (event.entity_id, event.event_type)
        counts[group] = counts.get(group, 0) + 1
        best = winners.get(group)
        if best is None or _date_key(event) >= _date_key(events[best]):
            winners[group] = i

    warnings: List[DataQualityWarning] = []
    result = list(events)
    for group, count in counts.items():
        if count < 2:
            continue
        keep = winners[group]
        for i, event in enumerate(result):
            if event.is_current and (event.entity_id, event.event_type) == group and i != keep:
                result[i] = event.with_current(False)
        warnings.append(
            data_quality_warning(
                "multiple_current_events",
                f"{count} {group[1]} events flagged current; kept the one dated "
                f"{result[keep].date}",
                entity_id=group[0],
                event_type=group[1],
            )
        )
    return result, warnings
