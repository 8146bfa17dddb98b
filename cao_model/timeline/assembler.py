# cao_model/timeline/assembler.py
"""
Merge ChangeEvents from one or more sources into an ordered, deduplicated
timeline.

Ordering: newest date first; within a date by event-type precedence
(contract start, contract end, conversion, salary, hours, anything else);
undated events last. Ties keep input order so output is deterministic.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple, Union

import pandas as pd

from cao_model.config.models import DEFAULT_SETTINGS, EngineSettings
from cao_model.exceptions import DataQualityWarning, data_quality_warning
from cao_model.normalization.events import (
    ChangeEvent,
    active_contract_keys,
    enforce_single_current,
)
from cao_model.normalization.normalizer import NormalizationResult, RecordLike, normalize_records
from cao_model.schema import (
    ENTITY_ID,
    EVENT_DATE,
    EVENT_TYPE,
    EVT_CONTRACT_START,
    TIMELINE_COLS,
    TIMELINE_DTYPES,
    event_precedence,
)
from cao_model.utils.date_utils import to_date, today

from .summary import TimelineSummary, assess_data_quality, employment_span

logger = logging.getLogger(__name__)

EventBatch = Union[NormalizationResult, Iterable[ChangeEvent]]


@dataclass
class Timeline:
    entity_ids: List[str]
    events: List[ChangeEvent]
    summary: TimelineSummary
    warnings: List[DataQualityWarning] = field(default_factory=list)

    @property
    def days(self) -> Dict[Optional[date], List[ChangeEvent]]:
        """Events grouped by date, newest first; undated events under None."""
        grouped: Dict[Optional[date], List[ChangeEvent]] = {}
        for event in self.events:
            grouped.setdefault(event.date, []).append(event)
        return grouped

    def current(self, event_type: str) -> Optional[ChangeEvent]:
        for event in self.events:
            if event.is_current and event.event_type == event_type:
                return event
        return None

    def to_frame(self) -> pd.DataFrame:
        """Events as a DataFrame with the timeline columns."""
        e = self.events
        data = {
            ENTITY_ID: [ev.entity_id for ev in e],
            EVENT_DATE: pd.to_datetime([ev.date for ev in e]),
            EVENT_TYPE: [ev.event_type for ev in e],
            "previous_value": pd.Series([ev.previous_value for ev in e], dtype="object"),
            "current_value": pd.Series([ev.current_value for ev in e], dtype="object"),
            "percent_change": pd.array([ev.percent_change for ev in e], dtype="Float64"),
            "is_current": [ev.is_current for ev in e],
            "source": [ev.source for ev in e],
            "record_id": [ev.record_id for ev in e],
            "low_confidence": [ev.low_confidence for ev in e],
        }
        df = pd.DataFrame({col: data[col] for col in TIMELINE_COLS})
        return df.astype(TIMELINE_DTYPES)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity_ids": list(self.entity_ids),
            "events": [ev.to_dict() for ev in self.events],
            "summary": self.summary.to_dict(),
            "warnings": [w.to_dict() for w in self.warnings],
        }


def _count_active(events: Iterable[ChangeEvent], active_keys: Set[Tuple]) -> int:
    """Contract starts active on the evaluation date, one per deduplicated event."""
    return sum(
        1
        for e in events
        if e.event_type == EVT_CONTRACT_START
        and (e.key in active_keys if e.date is not None else e.is_current)
    )


def _sort_key(indexed: Tuple[int, ChangeEvent]):
    i, event = indexed
    if event.date is None:
        return (1, 0, event_precedence(event.event_type), i)
    return (0, -event.date.toordinal(), event_precedence(event.event_type), i)


def _deduplicate(
    events: List[ChangeEvent], authoritative: Set[str]
) -> Tuple[List[ChangeEvent], List[DataQualityWarning]]:
    kept: List[ChangeEvent] = []
    position: Dict[Tuple, int] = {}
    warnings: List[DataQualityWarning] = []

    for event in events:
        # undated events cannot be matched reliably and are always kept
        if event.date is None:
            kept.append(event)
            continue
        i = position.get(event.key)
        if i is None:
            position[event.key] = len(kept)
            kept.append(event)
            continue

        existing = kept[i]
        same = existing.same_payload(event)
        take_new = event.source in authoritative and existing.source not in authoritative
        if take_new:
            kept[i] = event.with_current(existing.is_current or event.is_current)
        if not same:
            winner = event if take_new else existing
            loser = existing if take_new else event
            warnings.append(
                data_quality_warning(
                    "duplicate_event_conflict",
                    f"Conflicting {event.event_type} events on {event.date.isoformat()} "
                    f"from {existing.source!r} and {event.source!r}; kept {winner.source!r}",
                    entity_id=event.entity_id,
                    kept=winner.current_value,
                    dropped=loser.current_value,
                )
            )
    return kept, warnings


def assemble_timeline(
    *batches: EventBatch,
    now: Optional[Any] = None,
    settings: EngineSettings = DEFAULT_SETTINGS,
    warnings: Iterable[DataQualityWarning] = (),
) -> Timeline:
    """
    Merge event batches into a Timeline.

    Batches are read in order, so on a duplicate (entity, type, date) the
    earlier batch wins unless the later event comes from an authoritative
    source. A NormalizationResult contributes its warnings as well.
    """
    now = to_date(now) or today()
    all_warnings: List[DataQualityWarning] = list(warnings)
    merged: List[ChangeEvent] = []
    active_keys: Set[Tuple] = set()
    for batch in batches:
        if isinstance(batch, NormalizationResult):
            batch_events = list(batch.events)
            all_warnings.extend(batch.warnings)
            active_keys |= batch.active_keys | active_contract_keys(batch_events)
        else:
            batch_events = list(batch)
            active_keys |= active_contract_keys(batch_events)
        merged.extend(batch_events)

    events, dup_warnings = _deduplicate(merged, set(settings.authoritative_sources))
    all_warnings.extend(dup_warnings)
    active_count = _count_active(events, active_keys)

    events, current_warnings = enforce_single_current(events)
    all_warnings.extend(current_warnings)

    ordered = [e for _, e in sorted(enumerate(events), key=_sort_key)]
    summary = TimelineSummary(
        active_count=active_count,
        total_span=employment_span(ordered, now),
        data_quality=assess_data_quality(ordered),
    )
    entity_ids = sorted({e.entity_id for e in ordered})
    logger.info(
        "Assembled timeline for %s: %d events (%d merged away), %d warnings",
        ",".join(entity_ids) or "-",
        len(ordered),
        len(merged) - len(ordered),
        len(all_warnings),
    )
    return Timeline(
        entity_ids=entity_ids,
        events=ordered,
        summary=summary,
        warnings=all_warnings,
    )


def build_timeline(
    records: Iterable[RecordLike],
    entity_id: str,
    now: Optional[Any] = None,
    settings: EngineSettings = DEFAULT_SETTINGS,
    extra_events: EventBatch = (),
    source: Optional[str] = None,
) -> Timeline:
    """Normalize the records of one person and assemble their timeline.

    ``extra_events`` (e.g. from ``normalize_history_rows``) are merged after
    the record events.
    """
    now = to_date(now) or today()
    normalized = normalize_records(records, entity_id, now=now, source=source, settings=settings)
    return assemble_timeline(normalized, extra_events, now=now, settings=settings)
